from __future__ import annotations
import logging
from typing import Optional

import config


def configure_logging(level: Optional[int] = None, *, debug_events: bool = False) -> logging.Logger:
    """
    Readable root logging for applications and test runs.

    The library itself never installs handlers; it only logs through
    module loggers under "tagevents". debug_events=True turns those up
    to DEBUG (view creation/eviction, cancellations, callback failures)
    without touching other loggers.
    """
    logging.basicConfig(
        level=config.LOG_LEVEL if level is None else level,
        format=config.LOG_FORMAT,
        datefmt=config.LOG_DATEFMT,
    )

    pkg_logger = logging.getLogger("tagevents")
    if debug_events:
        pkg_logger.setLevel(logging.DEBUG)
    return pkg_logger
