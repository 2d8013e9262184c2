import logging

import pytest

import config
from tagevents.emitter import Emitter
from tagevents.log import configure_logging
from tagevents.models import MatchMode, OverflowPolicy


def test_defaults_follow_config():
    defaults = config.get_emitter_defaults()
    assert defaults == {
        "match_mode": "strict",
        "cache_size": 25,
        "buffer_limit": None,
        "overflow": "drop_oldest",
    }


def test_unknown_mode_rejected_by_config():
    with pytest.raises(ValueError):
        config.get_emitter_defaults("loose")


def test_emitter_reads_config_at_construction(monkeypatch):
    monkeypatch.setattr(config, "STREAM_CACHE_SIZE", 3)
    monkeypatch.setattr(config, "PAUSE_BUFFER_LIMIT", 1)
    monkeypatch.setattr(config, "PAUSE_OVERFLOW", "drop_newest")

    emitter = Emitter()
    assert emitter.views.capacity == 3
    assert emitter.match_mode is MatchMode.STRICT

    seen = []
    sub = emitter.on("t", seen.append)
    assert sub.buffer_limit == 1
    assert sub.overflow is OverflowPolicy.DROP_NEWEST


def test_explicit_arguments_override_config():
    emitter = Emitter(cache_size=2, match_mode="subtype", buffer_limit=5, overflow=OverflowPolicy.DROP_NEWEST)
    assert emitter.views.capacity == 2
    assert emitter.match_mode is MatchMode.SUBTYPE
    sub = emitter.on("t", lambda d: None)
    assert sub.buffer_limit == 5
    assert sub.overflow is OverflowPolicy.DROP_NEWEST


def test_configure_logging_enables_package_debug(caplog):
    pkg_logger = configure_logging(debug_events=True)
    assert pkg_logger.name == "tagevents"
    assert pkg_logger.level == logging.DEBUG

    with caplog.at_level(logging.DEBUG, logger="tagevents"):
        emitter = Emitter(cache_size=1)
        emitter.on("a")
        emitter.on("b")

    assert any("Evicted view for 'a'" in rec.getMessage() for rec in caplog.records)
    pkg_logger.setLevel(logging.NOTSET)


def test_callback_failures_are_logged(caplog):
    emitter = Emitter()

    def boom(data):
        raise ValueError("nope")

    emitter.on("t", boom)
    with caplog.at_level(logging.DEBUG, logger="tagevents"):
        with pytest.raises(ValueError):
            emitter.emit("t", 1)

    assert any(rec.name == "tagevents.bus" and rec.exc_info for rec in caplog.records)


def test_mode_names_are_case_insensitive():
    assert config.get_emitter_defaults("STRICT")["match_mode"] == "strict"
    assert config.get_emitter_defaults("Subtype")["match_mode"] == "subtype"
    assert Emitter(match_mode="SUBTYPE").match_mode is MatchMode.SUBTYPE
    assert Emitter(match_mode=MatchMode.STRICT).match_mode is MatchMode.STRICT
