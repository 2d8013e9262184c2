from __future__ import annotations
from concurrent.futures import Future
from typing import Any, AsyncIterator, Callable, Hashable, Optional
import asyncio

from .bus import BroadcastChannel, Subscription
from .errors import ChannelClosed
from .matching import Matcher
from .models import MISSING, Callback, TaggedEvent


class FilteredView:
    """
    Read-only stream of payloads for one tag (or every tag when event_type is None).

    A view holds no events itself. Each listen() attaches a fresh
    subscription to the emitter's channel, so a view can be listened to
    any number of times:

        view = emitter.on(KeyError)
        sub = view.listen(print)
        first = view.first()          # Future of the next KeyError
        async for err in view: ...    # new subscription per loop
    """

    def __init__(self, channel: BroadcastChannel, event_type: Optional[Hashable], matcher: Matcher) -> None:
        self.event_type = event_type
        self._channel = channel
        self._matcher = matcher

    def __repr__(self) -> str:
        label = "*" if self.event_type is None else repr(self.event_type)
        return f"FilteredView({label})"

    def matches(self, event: TaggedEvent) -> bool:
        return self._matcher(event)

    def listen(self, callback: Callback, *, on_done: Optional[Callable[[], Any]] = None) -> Subscription:
        return self._channel.attach(self, callback, on_done)

    def first(self, callback: Optional[Callback] = None) -> Future:
        """
        Future resolved with the next payload of this view.

        The future is already marked running, so callers cannot cancel it.
        `callback` runs inside the dispatch pass, right after the future
        resolves, and its exceptions propagate like any other subscriber's.
        If the emitter closes first, the future fails with ChannelClosed.
        """
        future: Future = Future()
        future.set_running_or_notify_cancel()

        def take(payload: Any) -> None:
            sub.cancel()
            if future.done():
                return
            future.set_result(payload)
            if callback is not None:
                callback(payload)

        def closed() -> None:
            if not future.done():
                future.set_exception(ChannelClosed(f"Emitter closed before {self!r} produced an event"))

        sub = self.listen(take, on_done=closed)
        return future

    def __aiter__(self) -> AsyncIterator[Any]:
        """
        Subscribe for the duration of an `async for`; ends when the emitter closes.

        The subscription is cancelled when the generator is closed. After a
        plain `break` that only happens once the event loop finalizes the
        generator, on a later loop turn; until then payloads keep queueing.
        To detach right away, close it explicitly:

            async with contextlib.aclosing(aiter(view)) as payloads:
                async for payload in payloads:
                    break
        """
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        queue: asyncio.Queue = asyncio.Queue()
        sub = self.listen(queue.put_nowait, on_done=lambda: queue.put_nowait(MISSING))
        try:
            while True:
                payload = await queue.get()
                if payload is MISSING:
                    return
                yield payload
        finally:
            sub.cancel()
