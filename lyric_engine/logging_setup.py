from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _EngineHandler(logging.StreamHandler):
    """Writes to whatever `sys.stderr` is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def _level(debug: bool) -> int:
    level = logging.DEBUG if debug else logging.INFO
    # env override, e.g. to trace stripper decisions from a host app
    level_name = os.getenv("LYRIC_ENGINE_LOG_LEVEL")
    if level_name:
        named = logging.getLevelName(level_name.upper())
        if isinstance(named, int):
            return named
    return level


def setup_logging(debug: bool) -> logging.Logger:
    """
    Configure the `lyric_engine` logger only; a host app's root logger is left alone.
    Safe to call more than once.
    """
    logger = logging.getLogger("lyric_engine")
    logger.setLevel(_level(debug))
    if not any(isinstance(h, _EngineHandler) for h in logger.handlers):
        handler = _EngineHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
