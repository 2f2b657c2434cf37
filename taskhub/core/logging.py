"""Structured logging configuration.

Every record is one JSON object on stdout. Context passed with `extra=`
(tenant, user, audit action, ...) is promoted to top-level keys, and the
current request id is stamped on by `RequestIdFilter`.
"""
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

# Set per request by RequestIdMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CONTEXT_FIELDS = ("request_id", "tenant_id", "user_id", "action", "path", "status_code", "duration_ms")


class RequestIdFilter(logging.Filter):
    """Attach the current request id to records logged while serving a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = request_id_var.get()
        if request_id and not getattr(record, "request_id", None):
            record.request_id = request_id
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(debug: bool = False) -> None:
    """Route all logging through a single JSON handler on stdout."""
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    # uvicorn's access log duplicates the request log line
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
