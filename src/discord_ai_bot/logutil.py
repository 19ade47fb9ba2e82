"""
Logging helpers: level from LOG_LEVEL and one-line JSON events.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any


def configure_logging(logger: logging.Logger) -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)
    root = logging.getLogger()
    if root.level and root.level > level:
        root.setLevel(level)


def request_id(context: Any) -> str | None:
    return getattr(context, "aws_request_id", None)


def log_event(logger: logging.Logger, msg: str, level: int = logging.INFO, **fields: Any) -> None:
    try:
        logger.log(level, json.dumps({"msg": msg, **fields}, ensure_ascii=False))
    except (TypeError, ValueError):
        # Fallback to plain log
        logger.log(level, "%s | %s", msg, fields)
