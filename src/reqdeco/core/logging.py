# reqdeco/core/logging.py
"""
JSON log output for the ``reqdeco`` logger tree.

Only the package logger is touched; handlers installed by the host
application on the root logger are left alone and records still propagate
to them.
"""
from __future__ import annotations

import logging
import sys

from pythonjsonlogger import jsonlogger

from reqdeco.core.config import settings

LOGGER_NAME = "reqdeco"


class _ReqdecoHandler(logging.StreamHandler):
    """Marker type so repeated configuration finds its own handler."""


def configure_logging(level: str | None = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or settings.log_level).upper())

    handler = next(
        (h for h in logger.handlers if isinstance(h, _ReqdecoHandler)), None
    )
    if handler is None:
        handler = _ReqdecoHandler(sys.stdout)
        logger.addHandler(handler)

    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    return logger
