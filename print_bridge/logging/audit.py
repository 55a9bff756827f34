"""Structured JSON audit logging for the print bridge.

Logs go to stdout as JSON lines, with optional file output via the
``audit_log_file`` setting. Three event shapes are emitted by the core:

- HTTP request: method, path, status, latency
- Print job: job_id, printer, status
- Error: error kind, message, context
"""

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from print_bridge.config.settings import Settings, get_settings

AUDIT_LOGGER_NAME = "print_bridge.audit"

# Request-scoped context for correlating log entries
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        # Merge any extra fields passed via `extra={}` kwarg
        if hasattr(record, "audit_data"):
            log_entry.update(record.audit_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(settings: Settings | None = None) -> None:
    """Configure the audit logger with JSON output."""
    settings = settings or get_settings()

    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.audit_log_file:
        file_handler = logging.FileHandler(settings.audit_log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger (avoids duplicate output)
    logger.propagate = False


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def log_request(method: str, path: str, status: int, latency_ms: float, client_ip: str) -> None:
    level = logging.WARNING if status >= 400 else logging.INFO
    get_audit_logger().log(
        level,
        "HTTP request",
        extra={"audit_data": {
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": client_ip,
        }},
    )


def log_print_job(job_id: str | None, printer: str, status: str, content_type: str) -> None:
    get_audit_logger().info(
        "Print job",
        extra={"audit_data": {
            "job_id": job_id,
            "printer": printer,
            "status": status,
            "content_type": content_type,
        }},
    )


def log_error(error: Exception, context: str) -> None:
    get_audit_logger().error(
        "Request failed",
        extra={"audit_data": {
            "error": type(error).__name__,
            "detail": str(error),
            "context": context,
        }},
    )


class RequestTimer:
    """Context manager to measure request latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
