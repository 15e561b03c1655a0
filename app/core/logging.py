import logging
from datetime import datetime, UTC
from typing import Any, Dict
from uuid import uuid4
from pythonjsonlogger.jsonlogger import JsonFormatter
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from app.core.config import settings
import time
import traceback

APP_LOGGERS = [
    "api.request",
    "api.events",
    "api.analysis",
    "recurrence",
    "vision",
    "db",
    "httpx",
    "uvicorn"
]

class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter for logs."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["name"] = record.name

        # Code location
        log_record["function"] = record.funcName
        log_record["module"] = record.module
        log_record["line"] = record.lineno

        log_record["environment"] = settings.ENVIRONMENT

        # Request context if available
        if hasattr(record, "request_id"):
            log_record["request_id"] = record.request_id
        if hasattr(record, "duration"):
            log_record["duration"] = record.duration

def _configure(level: str | int, propagate: bool) -> logging.Handler:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(CustomJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    for logger_name in APP_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = propagate
        if not propagate:
            logger.addHandler(console_handler)
    return console_handler

def setup_logging() -> None:
    """Configure JSON logging for the application."""
    _configure(settings.LOG_LEVEL.upper(), propagate=False)

def setup_test_logging() -> None:
    """Configure logging for tests with propagation enabled."""
    _configure(logging.DEBUG, propagate=True)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process the request and log details."""
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        start_time = time.time()

        request.state.request_id = request_id

        extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "duration": None
        }

        request_logger.info("Incoming request", extra=extra)

        try:
            response = await call_next(request)

            extra["duration"] = time.time() - start_time
            extra["status_code"] = response.status_code

            request_logger.info("Request completed", extra=extra)

            response.headers["X-Request-ID"] = request_id

            return response

        except Exception as e:
            extra["duration"] = time.time() - start_time
            extra["error"] = str(e)
            extra["error_type"] = e.__class__.__name__
            extra["traceback"] = traceback.format_exc()

            request_logger.error(f"{e.__class__.__name__} occurred", extra=extra)
            raise

# Create specific loggers
request_logger = logging.getLogger("api.request")
events_logger = logging.getLogger("api.events")
analysis_logger = logging.getLogger("api.analysis")
recurrence_logger = logging.getLogger("recurrence")
vision_logger = logging.getLogger("vision")
db_logger = logging.getLogger("db")
