from __future__ import annotations
from concurrent.futures import Future
from typing import Any, Callable, Hashable, Optional, Union
import logging

import config
from .bus import BroadcastChannel, Subscription
from .cache import LRUCache
from .errors import ChannelClosed
from .matching import check_supertype, check_tag, event_type_matcher, resolve
from .models import MISSING, Callback, MatchMode, OverflowPolicy
from .view import FilteredView

logger = logging.getLogger(__name__)


class Emitter:
    """
    In-process event source. Classes become emitters by holding one:

        class Downloader:
            def __init__(self):
                self.events = Emitter()
                self.on = self.events.on
                self.once = self.events.once

    Two ways to emit:

      1. a tag and its data
             emit("response", resp)      -> on("response") gets resp
             emit(KeyError, "missing")   -> on(KeyError) gets "missing"
             emit("done", None)          -> on("done") gets None

      2. a self-describing object, tagged with its own class
             emit(KeyError("missing"))   <=> emit(KeyError, KeyError("missing"))
             emit("text")                <=> emit(str, "text")

    Subscribing:

        view = emitter.on(KeyError)            # FilteredView, listen later
        sub = emitter.on(KeyError, handler)    # Subscription (pause/resume/cancel)
        fut = emitter.once("ready")            # Future of the next "ready" payload
        emitter.on(None, log_everything)       # every event

    Views are cached per tag (LRU, config.STREAM_CACHE_SIZE entries), so
    repeated on()/once() calls for a tag share one view and one match
    verdict per dispatch pass.
    """

    def __init__(
        self,
        cache_size: Optional[int] = None,
        match_mode: Union[MatchMode, str, None] = None,
        buffer_limit: Any = MISSING,
        overflow: Union[OverflowPolicy, str, None] = None,
    ) -> None:
        defaults = config.get_emitter_defaults(
            match_mode.name.lower() if isinstance(match_mode, MatchMode) else match_mode
        )

        self.match_mode = MatchMode.parse(defaults["match_mode"])
        self.views: LRUCache[FilteredView] = LRUCache(
            cache_size if cache_size is not None else defaults["cache_size"]
        )
        self._channel = BroadcastChannel(
            buffer_limit=defaults["buffer_limit"] if buffer_limit is MISSING else buffer_limit,
            overflow=OverflowPolicy.parse(overflow or defaults["overflow"]),
        )

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else f"{self._channel.subscriber_count} subscriptions"
        return f"Emitter({self.match_mode.name.lower()}, {state})"

    @property
    def is_closed(self) -> bool:
        return self._channel.is_closed

    @property
    def subscriber_count(self) -> int:
        return self._channel.subscriber_count

    def emit(self, event: Any, data: Any = MISSING) -> None:
        """Publish one event; every matching callback has run when this returns."""
        self._ensure_open()
        self._channel.publish(resolve(event, data))

    def on(
        self,
        event_type: Optional[Hashable] = None,
        callback: Optional[Callback] = None,
        *,
        on_done: Optional[Callable[[], Any]] = None,
    ) -> Union[FilteredView, Subscription]:
        """
        Events tagged `event_type` (all events when None).

        Without a callback the shared FilteredView is returned; with one,
        the callback is attached right away and its Subscription returned.
        """
        view = self._view(event_type)
        if callback is None:
            if on_done is not None:
                raise TypeError("on_done needs a callback to attach to")
            return view
        return view.listen(callback, on_done=on_done)

    def once(self, event_type: Optional[Hashable] = None, callback: Optional[Callback] = None) -> Future:
        """
        Future of the next payload tagged `event_type`.

        Other subscribers still see that event. `callback`, if given, is
        called with the payload inside the dispatch pass that resolves it.
        """
        return self._view(event_type).first(callback)

    def close(self) -> None:
        """Shut down for good: subscriptions end, pending once() futures fail."""
        if self.is_closed:
            return
        logger.debug("Closing %r", self)
        self.views.clear()
        self._channel.close()

    # -------------------------------
    # Views
    # -------------------------------

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise ChannelClosed("The emitter has been closed")

    def _view(self, event_type: Optional[Hashable]) -> FilteredView:
        self._ensure_open()
        if event_type is not None:
            check_tag(event_type)
            if self.match_mode is MatchMode.SUBTYPE:
                check_supertype(event_type)
        return self.views.get_or_create(event_type, self._create_view)

    def _create_view(self, event_type: Optional[Hashable]) -> FilteredView:
        logger.debug("Creating view for %r", event_type)
        return FilteredView(self._channel, event_type, event_type_matcher(event_type, self.match_mode))
