"""
Logging Configuration

JSON records in production, one readable line per record in development.

Context fields (tenant_id, user_id, admin_id) are passed via ``extra=``.
The request id is bound once per request by the HTTP middleware and is
stamped onto every record emitted while that request is being handled.
"""
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

CONTEXT_FIELDS = ("tenant_id", "user_id", "admin_id", "request_id", "path", "method")

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(request_id: Optional[str]):
    """Bind ``request_id`` for the current context. Returns a reset token."""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


class RequestContextFilter(logging.Filter):
    """Copy the bound request id onto records that don't carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = _request_id.get()
        return True


class JSONFormatter(logging.Formatter):
    """Machine-readable records for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        if getattr(record, "security_event", False):
            log_data["security_event"] = True
            log_data["event_type"] = getattr(record, "event_type", None)
            log_data["details"] = getattr(record, "event_details", {})

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure application logging. Call once at startup.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: emit JSON records instead of plain text
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(request_id)s] %(name)s %(levelname)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
    root_logger.addHandler(handler)

    # Quiet chatty libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_security_event(event_type: str, details: Dict[str, Any], logger: logging.Logger) -> None:
    """
    Log a security-relevant event at WARNING.

    Event types:
    - failed_login: bad credentials or inactive account (tenant or admin)
    - suspended_tenant_access: a suspended tenant's user signed in or called the API
    - trial_expired: trial ran out, detected at login or session check
    - invalid_token: token rejected or pointing at a missing user
    - forbidden_action: authenticated caller lacked the required role
    """
    extra = {
        "security_event": True,
        "event_type": event_type,
        "event_details": details,
    }
    for field in ("tenant_id", "user_id", "admin_id"):
        if field in details:
            extra[field] = details[field]

    logger.warning(f"SECURITY EVENT: {event_type}", extra=extra)
