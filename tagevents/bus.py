# Single multicast pipe every tagged event of one emitter flows through.
from __future__ import annotations
from collections import deque
from typing import TYPE_CHECKING, Any, Callable, Deque, Dict, List, Optional
import logging

from .errors import ChannelClosed, raise_collected
from .models import Callback, OverflowPolicy, SubscriptionState, TaggedEvent

if TYPE_CHECKING:
    from .view import FilteredView

logger = logging.getLogger(__name__)


class Subscription:
    """
    A callback attached to one view of the channel.

    The handle is the only way to stop it:
        sub = emitter.on("tick", on_tick)
        sub.pause()    # events are buffered
        sub.resume()   # buffered events delivered now, in order
        sub.cancel()   # nothing more, buffer discarded
    """

    def __init__(
        self,
        channel: BroadcastChannel,
        view: FilteredView,
        callback: Callback,
        on_done: Optional[Callable[[], Any]] = None,
        buffer_limit: Optional[int] = None,
        overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ) -> None:
        self.view = view
        self.state = SubscriptionState.ACTIVE
        self.buffer_limit = buffer_limit
        self.overflow = overflow
        self.dropped = 0

        self._channel = channel
        self._callback = callback
        self._on_done = on_done
        self._buffer: Deque[Any] = deque()

    def __repr__(self) -> str:
        return f"Subscription({self.view.event_type!r}, {self.state.name})"

    @property
    def is_active(self) -> bool:
        return self.state is SubscriptionState.ACTIVE

    @property
    def is_paused(self) -> bool:
        return self.state is SubscriptionState.PAUSED

    @property
    def is_cancelled(self) -> bool:
        return self.state is SubscriptionState.CANCELLED

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def pause(self) -> None:
        if self.state is SubscriptionState.ACTIVE:
            self.state = SubscriptionState.PAUSED

    def resume(self) -> None:
        """Reactivate and deliver whatever was buffered while paused."""
        if self.state is not SubscriptionState.PAUSED:
            return
        self.state = SubscriptionState.ACTIVE

        errors: List[BaseException] = []
        # A callback may pause or cancel again mid-flush; stop there.
        while self._buffer and self.state is SubscriptionState.ACTIVE:
            payload = self._buffer.popleft()
            try:
                self._callback(payload)
            except Exception as exc:
                logger.debug("Callback failed while flushing %r", self, exc_info=True)
                errors.append(exc)
        raise_collected(errors)

    def cancel(self) -> None:
        if self.state is SubscriptionState.CANCELLED:
            return
        self.state = SubscriptionState.CANCELLED
        self._buffer.clear()
        self._channel._detach(self)
        logger.debug("Cancelled %r", self)

    # -------------------------------
    # Channel side
    # -------------------------------

    def _deliver(self, payload: Any) -> None:
        if self.state is SubscriptionState.CANCELLED:
            return
        # Anything still buffered goes first, so new events queue behind it.
        if self.state is SubscriptionState.PAUSED or self._buffer:
            self._enqueue(payload)
            return
        self._callback(payload)

    def _enqueue(self, payload: Any) -> None:
        if self.buffer_limit is not None and len(self._buffer) >= self.buffer_limit:
            self.dropped += 1
            if self.overflow is OverflowPolicy.DROP_NEWEST or not self._buffer:
                return
            self._buffer.popleft()
        self._buffer.append(payload)

    def _complete(self) -> None:
        """Channel closed: end permanently and notify on_done."""
        self.state = SubscriptionState.CANCELLED
        self._buffer.clear()
        if self._on_done is not None:
            self._on_done()


class BroadcastChannel:
    """
    Synchronous multicast of TaggedEvents to every attached subscription.

    - Subscriptions are served in attachment order.
    - A publish made from inside a callback is queued and delivered after
      the current pass, so every subscriber sees events in emission order.
    - Past events are never replayed to late subscribers.
    - Once closed, publish() and attach() raise ChannelClosed.
    """

    def __init__(
        self,
        buffer_limit: Optional[int] = None,
        overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ) -> None:
        if buffer_limit is not None and buffer_limit < 0:
            raise ValueError(f"buffer_limit must be >= 0 or None, got {buffer_limit}")
        self.buffer_limit = buffer_limit
        self.overflow = overflow

        self._subs: List[Subscription] = []
        self._pending: Deque[TaggedEvent] = deque()
        self._dispatching = False
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    def attach(
        self,
        view: FilteredView,
        callback: Callback,
        on_done: Optional[Callable[[], Any]] = None,
    ) -> Subscription:
        if self._closed:
            raise ChannelClosed("Cannot subscribe: the emitter has been closed")
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        sub = Subscription(self, view, callback, on_done, self.buffer_limit, self.overflow)
        self._subs.append(sub)
        return sub

    def _detach(self, sub: Subscription) -> None:
        try:
            self._subs.remove(sub)
        except ValueError:
            pass

    def publish(self, event: TaggedEvent) -> None:
        if self._closed:
            raise ChannelClosed("Cannot emit: the emitter has been closed")

        self._pending.append(event)
        if self._dispatching:
            # Re-entrant emit: the outer publish drains it after the current pass.
            return

        self._dispatching = True
        errors: List[BaseException] = []
        try:
            while self._pending:
                errors.extend(self._dispatch(self._pending.popleft()))
        finally:
            # Only an aborted pass leaves events queued.
            self._pending.clear()
            self._dispatching = False
        raise_collected(errors)

    def _dispatch(self, event: TaggedEvent) -> List[BaseException]:
        # Subscriptions sharing a view share one match verdict per pass.
        verdicts: Dict[FilteredView, bool] = {}
        errors: List[BaseException] = []

        for sub in list(self._subs):
            if sub.is_cancelled:
                continue
            hit = verdicts.get(sub.view)
            if hit is None:
                hit = verdicts[sub.view] = sub.view.matches(event)
            if not hit:
                continue
            try:
                sub._deliver(event.data)
            except Exception as exc:
                logger.debug("Callback failed for tag %r", event.tag, exc_info=True)
                errors.append(exc)
        return errors

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()

        subs, self._subs = self._subs, []
        logger.debug("Closing channel with %d subscriptions", len(subs))

        errors: List[BaseException] = []
        for sub in subs:
            try:
                sub._complete()
            except Exception as exc:
                errors.append(exc)
        raise_collected(errors)
