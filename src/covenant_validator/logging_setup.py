"""
Logging setup for the command line.

Library modules only ever call ``logging.getLogger(__name__)``; the CLI
installs a single stderr handler here so stdout stays reserved for the
markdown report.

Two formats:

- ``text``: ``LEVEL logger: message`` for humans.
- ``json``: one JSON object per line for log shippers (timestamp, level,
  logger, message).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

_ROOT_LOGGER = "covenant_validator"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "warning", fmt: str = "text") -> logging.Logger:
    """Attach one stderr handler to the package logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(logger.handlers):
        if getattr(handler, "_covenant_validator", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler._covenant_validator = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger
