"""
Core Logging Module

Centralized logging configuration with trace_id injection for request tracing.
Uses contextvars so the trace_id follows each request through resolver and
store-client awaits.

Usage:
    # At application startup:
    from chemstock.core.logging import setup_logging
    setup_logging()

    # In request handlers:
    from chemstock.core.logging import set_trace_id
    set_trace_id(request.headers.get("x-request-id"))
    logger.info("Resolving authorization")  # Includes trace_id
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional


# ==================== Context Variables ====================

TRACE_ID: ContextVar[str] = ContextVar("trace_id", default="-")


def set_trace_id(trace_id: Optional[str]) -> None:
    """Set the trace_id for the current async context ("-" clears it)."""
    TRACE_ID.set(trace_id or "-")


def get_trace_id() -> str:
    """Current trace_id or "-" if not set."""
    return TRACE_ID.get()


# ==================== Log Filters ====================

class TraceIdFilter(logging.Filter):
    """
    Logging filter that injects trace_id into log records,
    making it available to formatters.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


# ==================== Logging Setup ====================

_logging_setup_done = False

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(trace_id)s] %(name)s: %(message)s"


def setup_logging(log_level: Optional[str] = None, force: bool = False) -> None:
    """
    Configure application-wide logging with trace_id support.

    Idempotent unless force=True.

    Args:
        log_level: Optional level override (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            defaults to settings.LOG_LEVEL
        force: Reconfigure even if already set up
    """
    global _logging_setup_done

    if _logging_setup_done and not force:
        return

    if log_level is None:
        from chemstock.core.config import settings
        log_level = settings.LOG_LEVEL

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if force:
        root_logger.handlers.clear()

    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(
            logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        console_handler.addFilter(TraceIdFilter())
        root_logger.addHandler(console_handler)

    _logging_setup_done = True

    logging.getLogger(__name__).info(f"Logging configured with level: {log_level.upper()}")
