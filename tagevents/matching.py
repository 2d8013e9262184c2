from __future__ import annotations
from typing import Any, Callable, Hashable, Optional

from .errors import InvalidTagUsage
from .models import MISSING, MatchMode, TaggedEvent

Matcher = Callable[[TaggedEvent], bool]


# ============================================================
#   TAG RESOLUTION
# ============================================================

def check_tag(tag: Any) -> Hashable:
    """Fail fast on tags the cache and == comparison cannot work with."""
    try:
        hash(tag)
    except TypeError as exc:
        raise InvalidTagUsage(
            f"Event tags must be hashable, got {type(tag).__name__}: {tag!r}"
        ) from exc
    return tag


def resolve(event: Any, data: Any = MISSING) -> TaggedEvent:
    """
    Turn the two emit() call shapes into one TaggedEvent.

        resolve(err)              -> TaggedEvent(type(err), err)
        resolve("success", 42)    -> TaggedEvent("success", 42)
        resolve("success", None)  -> TaggedEvent("success", None)

    None cannot be an explicit tag: subscribers use it to mean "everything".
    """
    if data is MISSING:
        return TaggedEvent(type(event), event)

    if event is None:
        raise InvalidTagUsage("None is reserved for 'all events' and cannot be emitted as a tag")
    return TaggedEvent(check_tag(event), data)


# ============================================================
#   MATCHERS
# ============================================================

def is_subtype(tag: Any, event_type: Any) -> bool:
    """True when both tags are classes and `tag` derives from `event_type`."""
    if not (isinstance(tag, type) and isinstance(event_type, type)):
        return False
    return issubclass(tag, event_type)


def check_supertype(event_type: Any) -> Any:
    """Reject class tags issubclass() refuses, e.g. a Protocol that is not @runtime_checkable."""
    if isinstance(event_type, type):
        try:
            issubclass(object, event_type)
        except TypeError as exc:
            raise InvalidTagUsage(
                f"{event_type!r} cannot be used for subtype matching: {exc}"
            ) from exc
    return event_type


def event_type_matcher(event_type: Optional[Hashable], mode: MatchMode = MatchMode.STRICT) -> Matcher:
    """Build the filter a view applies to every TaggedEvent on the channel."""
    if event_type is None:
        return lambda event: True

    if mode is MatchMode.SUBTYPE:
        def match(event: TaggedEvent) -> bool:
            if event.tag == event_type:
                return True
            return is_subtype(event.tag, event_type)
        return match

    return lambda event: event.tag == event_type
