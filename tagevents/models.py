from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar
from enum import Enum, auto

T = TypeVar("T")

Callback = Callable[[Any], Any]


class _Missing(Enum):
    """Marks an argument the caller left out (as opposed to an explicit None)."""
    MISSING = auto()


MISSING = _Missing.MISSING


class MatchMode(Enum):
    STRICT = auto()     # tags compared with ==
    SUBTYPE = auto()    # == or, for class tags, issubclass(event tag, subscribed tag)

    @classmethod
    def parse(cls, value) -> "MatchMode":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown match mode: {value!r}") from None


class OverflowPolicy(Enum):
    DROP_OLDEST = auto()
    DROP_NEWEST = auto()

    @classmethod
    def parse(cls, value) -> "OverflowPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown overflow policy: {value!r}") from None


class SubscriptionState(Enum):
    ACTIVE = auto()
    PAUSED = auto()
    CANCELLED = auto()


@dataclass(frozen=True)
class TaggedEvent:
    """One emission: the tag subscribers match against, and the payload they receive."""
    tag: Hashable
    data: Any


class EventType(Generic[T]):
    """
    Opaque marker usable as a tag when no natural type exists.

        FINISHED = EventType[Result]("finished")
        emitter.emit(FINISHED, result)
        emitter.on(FINISHED, handle_result)

    Instances compare and hash by identity, so two markers with the same
    name are still different tags. Subclasses work as hierarchical class
    tags for subtype matching:

        class ResultEvent(EventType[Result]): ...
        class Finished(ResultEvent): ...
        emitter.on(ResultEvent, ...)   # also sees emit(Finished, result)
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name

    def __repr__(self) -> str:
        label = self.name if self.name is not None else hex(id(self))
        return f"{type(self).__name__}({label})"
