"""Logging setup for the release engine and its CLI.

Plain text logging is the default.  With ``RELEASE_STRUCTURED_LOGGING=true``
every record is emitted as a single JSON line instead::

    {
        "timestamp": "2026-05-15T12:34:56.789012+00:00",
        "level": "INFO",
        "logger": "release_engine.diff.project_diff",
        "message": "Diff complete: ...",
        "flow_external_id": "...", // per-flow records from the differ
        "diff": { ... },              // per-diff operation counts
        "exc_info": "Traceback ..."  // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from release_engine.config import Settings

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON.

    Attributes listed in ``context_fields`` are copied from the record when
    a caller passed them through ``extra=``.
    """

    context_fields: tuple[str, ...] = ("flow_external_id", "diff")

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            {name: getattr(record, name) for name in self.context_fields if getattr(record, name, None) is not None}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: Settings) -> logging.Handler:
    """Replace the root logger's handlers with one writing to *stderr*.

    Returns the installed handler.
    """
    handler = logging.StreamHandler(sys.stderr)
    if settings.structured_logging:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)
    return handler
