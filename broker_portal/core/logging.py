import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Optional

from broker_portal.core.context import get_broker_id, get_request_id
from broker_portal.core.settings import settings

AUDIT_LOGGER = "broker_portal.audit"
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class RequestContextFilter(logging.Filter):
    """Stamp each record with the current request and broker ids."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.broker_id = get_broker_id()
        record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``stream_label`` separates audit records from the rest."""

    def __init__(self, stream_label: str = "transactional") -> None:
        super().__init__()
        self.stream_label = stream_label

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stream": self.stream_label,
            "broker_id": getattr(record, "broker_id", "-"),
            "request_id": getattr(record, "request_id", "-"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _stdout_handler(formatter: str, level: str) -> dict:
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "formatter": formatter,
        "filters": ["request_context"],
        "stream": "ext://sys.stdout",
    }


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or settings.log_level).upper()
    loggers = {
        name: {"handlers": ["default"], "level": log_level, "propagate": False}
        for name in ("", *_SERVER_LOGGERS)
    }
    # Audit records go only to their own handler.
    loggers[AUDIT_LOGGER] = {"handlers": ["audit"], "level": log_level, "propagate": False}
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_context": {"()": RequestContextFilter}},
            "formatters": {
                "json": {"()": JsonFormatter, "stream_label": "transactional"},
                "audit_json": {"()": JsonFormatter, "stream_label": "audit"},
            },
            "handlers": {
                "default": _stdout_handler("json", log_level),
                "audit": _stdout_handler("audit_json", log_level),
            },
            "loggers": loggers,
        }
    )
    logging.getLogger(__name__).info(
        "Logging configured for environment=%s level=%s",
        settings.environment,
        log_level,
    )


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER)
