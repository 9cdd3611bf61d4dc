"""
Structured logging with request correlation and bound context fields.

Usage:
    from observability import get_logger, log_context

    logger = get_logger(__name__)
    with log_context(platform="Modrinth"):
        logger.info("Sync finished", extra={"succeeded": 98, "failed": 2})

Every record emitted inside `log_context` carries the bound fields, and every
record emitted during a request carries its correlation_id.
"""

import logging
import os
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Mapping, Optional

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "modpack-index-backend"

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
_bound_fields: ContextVar[Mapping[str, Any]] = ContextVar("log_fields", default={})

REDACTED = "[REDACTED]"


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def generate_correlation_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


@contextmanager
def correlation_id_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id (generated when missing) for the enclosed block."""
    value = correlation_id or generate_correlation_id()
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


@contextmanager
def log_context(**fields: Any) -> Iterator[Mapping[str, Any]]:
    """Attach `fields` to every record logged in the enclosed block. Nested blocks merge."""
    merged = {**_bound_fields.get(), **fields}
    token = _bound_fields.set(merged)
    try:
        yield merged
    finally:
        _bound_fields.reset(token)


class ContextFilter(logging.Filter):
    """Stamps the correlation id and any bound fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "none"
        for key, value in _bound_fields.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class SensitiveDataFilter(logging.Filter):
    """Redacts upstream credentials and connection strings from log records."""

    SENSITIVE_KEYS = frozenset(
        {
            "password",
            "token",
            "secret",
            "authorization",
            "api_key",
            "x-api-key",
            "curseforge_api_key",
            "redis_url",
            "database_url",
        }
    )

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.args = self.redact(record.args)
        for key in [k for k in record.__dict__ if k.lower() in self.SENSITIVE_KEYS]:
            setattr(record, key, REDACTED)
        return True

    @classmethod
    def redact(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {
                key: REDACTED if str(key).lower() in cls.SENSITIVE_KEYS else cls.redact(value)
                for key, value in data.items()
            }
        if isinstance(data, (list, tuple)):
            return type(data)(cls.redact(item) for item in data)
        return data


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            correlation_id=getattr(record, "correlation_id", "none"),
            environment=os.getenv("ENVIRONMENT", "development"),
            service=SERVICE_NAME,
        )
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(correlation_id)s %(message)s",
            rename_fields={"timestamp": "@timestamp"},
        )
    return logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging() -> None:
    """
    Replace the root logger's handlers with one stderr handler.

    Environment variables:
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
    - LOG_FORMAT: json or text (default: json in production, text otherwise)
    - ENVIRONMENT: development, staging, production
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "json" if os.getenv("ENVIRONMENT") == "production" else "text")

    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(log_format))
    handler.addFilter(ContextFilter())
    handler.addFilter(SensitiveDataFilter())

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
