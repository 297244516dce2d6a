"""Structured logging: correlation ids, per-process context fields, timing and PII masking.

Every line logged through ``StructuredLogger`` carries the request's
correlation id and, inside a process run, the process name and id bound
with ``log_context``. Messages are masked before they leave the process.
"""

import logging
import time
import uuid
import re
from contextvars import ContextVar
from typing import Any, Optional, Dict
from contextlib import contextmanager

from src.utils.logging_config import LoggingConfig, get_logger


_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
_context_fields_var: ContextVar[Dict[str, Any]] = ContextVar('log_context_fields', default={})

_EMAIL = re.compile(r'[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}', re.IGNORECASE)
# Swedish personnummer: YYMMDD-XXXX or YYYYMMDDXXXX
_PNR = re.compile(r'\b(?:19|20)?\d{6}[-+]?\d{4}\b')
# Swedish mobile numbers: 070-123 45 67, +46 70 123 45 67
_PHONE = re.compile(r'(?:\+46\s?|\b0)7\d[\s-]?\d{3}[\s-]?\d{2}[\s-]?\d{2}\b')


def generate_correlation_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """Bind a correlation id (new unless given) for the duration of a request."""
    if correlation_id is None:
        correlation_id = generate_correlation_id()

    token = _correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_var.reset(token)


@contextmanager
def log_context(**fields: Any):
    """Add fields to every structured log line emitted inside the block."""
    token = _context_fields_var.set({**_context_fields_var.get(), **fields})
    try:
        yield
    finally:
        _context_fields_var.reset(token)


def mask_sensitive_data(text: str) -> str:
    """Mask e-mail addresses, mobile numbers and personnummer, in that order."""
    if not text or not LoggingConfig.LOG_MASK_SENSITIVE:
        return text

    text = _EMAIL.sub('[REDACTED_EMAIL]', text)
    text = _PHONE.sub('[REDACTED_PHONE]', text)
    return _PNR.sub('[REDACTED_PNR]', text)


def mask_email(email: Optional[str]) -> Optional[str]:
    """Keep the first character and the domain of an email address."""
    if not email or not LoggingConfig.LOG_MASK_SENSITIVE:
        return email
    local, _, domain = email.partition("@")
    if not domain:
        return "[REDACTED_EMAIL]"
    return f"{local[:1]}***@{domain}"


class StructuredLogger:
    """Logger wrapper: keyword arguments become ``extra`` fields."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _get_extra(self, **kwargs: Any) -> Dict[str, Any]:
        extra: Dict[str, Any] = {}

        correlation_id = get_correlation_id()
        if correlation_id:
            extra["correlation_id"] = correlation_id

        extra.update(_context_fields_var.get())
        extra.update(kwargs)
        return extra

    def log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, mask_sensitive_data(message), extra=self._get_extra(**kwargs), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, exc_info=exc_info, **kwargs)


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """Log how long the block took; warn past ``LOG_SLOW_OPERATION_THRESHOLD_MS``."""
    if logger is None:
        logger = get_structured_logger(__name__)

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(f"Completed {operation_name}", operation=operation_name, processing_time_ms=elapsed_ms, **context)

        if elapsed_ms > LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                f"Slow operation detected: {operation_name}",
                operation=operation_name,
                processing_time_ms=elapsed_ms,
                threshold_ms=LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS,
                **context
            )
