"""Structured logging utilities for the users Lambda.

Log lines are single JSON objects so they can be queried with
CloudWatch Logs Insights.

SECURITY NOTES:
- Use mask_email() when logging email addresses
- Use hash_for_correlation() for identity-provider subject ids
- Never log passwords, tokens, or secret payloads
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Mapping
from typing import MutableMapping
from typing import Optional

_SERVICE_NAME = "users-handler"

request_id: ContextVar[str] = ContextVar("request_id", default="")


def mask_email(email: str) -> str:
    """Mask an email address for safe logging.

    Examples:
        >>> mask_email("alice@example.com")
        'al***@***.com'
        >>> mask_email("a@b.co")
        'a***@***.co'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)
    visible_local = local[:2] if len(local) > 2 else local[:1]
    domain_parts = domain.rsplit(".", 1)
    tld = domain_parts[-1] if len(domain_parts) > 1 else ""
    return f"{visible_local}***@***.{tld}" if tld else f"{visible_local}***@***"


def hash_for_correlation(value: str) -> str:
    """Return a short, stable hash of a value for log correlation."""
    return hashlib.sha256(value.encode()).hexdigest()[:12]


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with request id and exception details."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": _SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            "source": {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        req_id = request_id.get()
        if req_id:
            log_data["request_id"] = req_id

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key in ("event", "response", "user"):
            value = getattr(record, key, None)
            if isinstance(value, dict):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges adapter context into ``extra``."""

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if self.extra:
            extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(level: Optional[str] = None) -> None:
    """Install the JSON formatter on the root logger.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL environment
               variable or INFO.
    """
    log_level: str = level or os.getenv("LOG_LEVEL") or "INFO"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredLogFormatter())
    root_logger.addHandler(handler)

    for noisy in ("boto3", "botocore", "urllib3", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Get a context-aware logger for ``name``."""
    return ContextLogger(logging.getLogger(name), extra)


def set_request_context(req_id: Optional[str] = None) -> None:
    """Attach the API Gateway request id to subsequent log lines."""
    if req_id:
        request_id.set(req_id)


def clear_request_context() -> None:
    """Clear request context after the invocation."""
    request_id.set("")


def log_lambda_event(logger: ContextLogger, event: Mapping[str, Any]) -> None:
    """Log the method, path and id of an inbound event at DEBUG level.

    The body is never logged, only its length.
    """
    body = event.get("body") or ""
    log_data = {
        "http_method": event.get("httpMethod"),
        "path": event.get("path"),
        "path_params": event.get("pathParameters"),
        "body_length": len(body),
    }
    logger.debug("Lambda event received", extra={"event": log_data})


def log_response(
    logger: ContextLogger,
    status_code: int,
    duration_ms: Optional[float] = None,
) -> None:
    """Log response status, at WARNING for 4xx/5xx."""
    log_data: dict[str, Any] = {"status_code": status_code}
    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)

    level = logging.INFO if status_code < 400 else logging.WARNING
    logger.log(level, "Lambda response", extra={"response": log_data})
