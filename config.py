# Global knobs (emitter defaults + logging)
import logging

# Filtered view cache: number of per-tag views kept per emitter.
# Accessing a view refreshes it; the least recently used one is evicted first.
STREAM_CACHE_SIZE = 25

# Tag matching: "strict" compares tags with ==,
# "subtype" also lets a class tag match any of its subclasses.
DEFAULT_MATCH_MODE = "strict"

# ---------------------------------------------------------------------
# Pause buffering
# A paused subscription keeps the events it would have received.
# PAUSE_BUFFER_LIMIT = None keeps everything (unbounded).
# With a limit, PAUSE_OVERFLOW decides which event is dropped:
#   "drop_oldest" -> discard the oldest buffered event
#   "drop_newest" -> discard the incoming event
# ---------------------------------------------------------------------
PAUSE_BUFFER_LIMIT = None
PAUSE_OVERFLOW = "drop_oldest"

# Logging (only applied by tagevents.log.configure_logging)
LOG_LEVEL = logging.WARNING
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# ---------------------------------------------------------------------
# Known match modes / overflow policies. Anything else is rejected.
# ---------------------------------------------------------------------
MATCH_MODES = ("strict", "subtype")
OVERFLOW_POLICIES = ("drop_oldest", "drop_newest")


def get_emitter_defaults(mode: str | None = None):
    """Resolve the settings a new Emitter starts from."""
    mode = str(mode or DEFAULT_MATCH_MODE).lower()
    if mode not in MATCH_MODES:
        raise ValueError(f"Unknown match mode: {mode!r} (expected one of {MATCH_MODES})")
    if str(PAUSE_OVERFLOW).lower() not in OVERFLOW_POLICIES:
        raise ValueError(f"Unknown overflow policy: {PAUSE_OVERFLOW!r}")

    return {
        "match_mode": mode,
        "cache_size": STREAM_CACHE_SIZE,
        "buffer_limit": PAUSE_BUFFER_LIMIT,
        "overflow": PAUSE_OVERFLOW,
    }
