"""Root logger setup for the ledger-sync CLI.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the command-line entry point.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

from ledger_sync.config import LoggingSettings

_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(settings: LoggingSettings) -> logging.Handler:
    """Install a single stderr handler on the root logger.

    Calling this again replaces the handler installed by the previous call
    instead of stacking a second one.

    Args:
        settings: Level and format (``simple``, ``detailed`` or ``json``).

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler(sys.stderr)
    if settings.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_FORMATS.get(settings.format, _FORMATS["detailed"])))
    handler.set_name("ledger_sync")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "ledger_sync":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
    return handler
