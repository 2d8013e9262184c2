from typing import List, Sequence


class EmitterError(RuntimeError):
    """Base class for everything the emitter raises on its own behalf."""


class ChannelClosed(EmitterError):
    """emit / on / once attempted after the emitter was shut down."""


class InvalidTagUsage(EmitterError, TypeError):
    """A tag that cannot be hashed/compared, or None used as an explicit tag."""


class DispatchError(EmitterError):
    """
    Several callbacks raised during one dispatch pass.

    Every subscriber of the pass still got the event; the collected
    exceptions are kept in delivery order on `errors`.
    """

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        kinds = ", ".join(type(e).__name__ for e in self.errors)
        super().__init__(f"{len(self.errors)} subscriber callbacks failed: {kinds}")


def raise_collected(errors: Sequence[BaseException]) -> None:
    """Re-raise what a finished pass collected: one error as-is, several wrapped."""
    if not errors:
        return
    if len(errors) == 1:
        raise errors[0]
    raise DispatchError(errors) from errors[0]
