"""Logging setup for the gateway process.

Plain text by default; ``LOG_JSON=true`` switches to one JSON object per line.
Gateway call records carry ``request_id``, ``target``, ``call_name`` and
``duration_ms`` extras, which the JSON formatter lifts to top-level fields.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from universal_gateway.core.config import Settings, settings as default_settings

# LogRecord attributes copied into JSON output when present
CALL_FIELDS = ("request_id", "target", "call_name", "duration_ms")

# Third-party loggers kept at WARNING unless debugging
_QUIET_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CALL_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(settings: Settings | None = None) -> None:
    """Install a single stdout handler on the root logger."""
    settings = settings or default_settings
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(level if settings.app_debug else logging.WARNING)
