from __future__ import annotations

import logging

import pytest

from lyric_engine.logging_setup import setup_logging


@pytest.fixture
def engine_logger(monkeypatch):
    monkeypatch.delenv("LYRIC_ENGINE_LOG_LEVEL", raising=False)
    logger = logging.getLogger("lyric_engine")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_debug_flag(engine_logger):
    assert setup_logging(True) is engine_logger
    assert engine_logger.level == logging.DEBUG
    setup_logging(False)
    assert engine_logger.level == logging.INFO


def test_env_override(engine_logger, monkeypatch):
    monkeypatch.setenv("LYRIC_ENGINE_LOG_LEVEL", "warning")
    setup_logging(True)
    assert engine_logger.level == logging.WARNING


def test_unknown_env_level_is_ignored(engine_logger, monkeypatch):
    monkeypatch.setenv("LYRIC_ENGINE_LOG_LEVEL", "loud")
    setup_logging(True)
    assert engine_logger.level == logging.DEBUG


def test_handler_added_once_and_root_untouched(engine_logger):
    root_level = logging.getLogger().level
    setup_logging(False)
    count = len(engine_logger.handlers)
    setup_logging(False)
    assert len(engine_logger.handlers) == count
    assert logging.getLogger().level == root_level
