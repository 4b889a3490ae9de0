"""Logger setup for the ``seamweld`` family.

Every module logs through a child of the ``seamweld`` logger. That logger owns
one stdout handler and does not propagate, so merge and combine summaries show
up without the host application configuring anything, and nothing seamweld
emits reaches the process root logger.

The package ``__init__`` attaches a NullHandler at import time so that merely
importing seamweld stays silent for tools that inspect handlers. The first
``get_logger`` call replaces it with the stdout handler. A handler installed
by someone else (a test harness, an application) is left alone.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union

_FAMILY = 'seamweld'
_FORMAT = '%(levelname)s %(name)s: %(message)s'

LevelLike = Union[str, int, None]


def _family_logger() -> logging.Logger:
    family = logging.getLogger(_FAMILY)
    real = [h for h in family.handlers if not isinstance(h, logging.NullHandler)]
    if len(real) != len(family.handlers):
        for h in family.handlers[:]:
            if isinstance(h, logging.NullHandler):
                family.removeHandler(h)
    if not real:
        stdout = logging.StreamHandler(stream=sys.stdout)
        stdout.setFormatter(logging.Formatter(_FORMAT))
        family.addHandler(stdout)
    family.propagate = False
    return family


def _level(level: LevelLike, default: int = logging.INFO) -> int:
    """Accept ``'debug'``, ``'INFO'`` or a numeric level; unknown names give ``default``."""
    if level is None:
        return default
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else default


def configure_logging(level: LevelLike = 'INFO') -> None:
    """Set the level of every seamweld logger at once.

    Children created by ``get_logger`` without an explicit level inherit it.
    The process root logger and its handlers are not touched.
    """
    _family_logger().setLevel(_level(level))


def get_logger(name: str, level: LevelLike = None) -> logging.Logger:
    """Return the logger ``name`` inside the seamweld family.

    A bare name such as ``'stitcher'`` is placed under ``seamweld.`` so its
    records reach the family handler. Without ``level`` the logger is reset to
    NOTSET and follows ``configure_logging``.
    """
    _family_logger()
    if name != _FAMILY and not name.startswith(_FAMILY + '.'):
        name = f'{_FAMILY}.{name}'
    log = logging.getLogger(name)
    log.setLevel(logging.NOTSET if level is None else _level(level))
    return log


__all__ = ['get_logger', 'configure_logging']
