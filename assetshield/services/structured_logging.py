"""
Structured JSON logging for the AssetShield platform.

Log lines carry timestamp, level, logger, message and the request context
(request_id, method, path, host, customer_id) plus any keyword fields passed
to the logger call. Set ``ASSETSHIELD_LOG_JSON=false`` for plain text output
during local development.
"""

import json
import logging
import time
from datetime import datetime, timezone

from flask import Flask, g, has_request_context, request

from assetshield.services.request_context import get_request_context, get_request_id

QUIET_PATHS = ("/healthz", "/readyz", "/metrics")

PLATFORM_LOGGERS = [
    "assetshield.provisioning",
    "assetshield.domains",
    "assetshield.white_label",
    "assetshield.leads",
    "assetshield.auth",
    "assetshield.stripe",
    "assetshield.notifications",
]


class StructuredFormatter(logging.Formatter):
    """Renders records as one JSON object per line."""

    def __init__(self, json_enabled: bool = True):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")
        self.json_enabled = json_enabled

    def format(self, record: logging.LogRecord) -> str:
        if not self.json_enabled:
            return super().format(record)

        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if has_request_context():
            log_entry.update(get_request_context())
        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class StructuredLogger:
    """Thin wrapper that turns keyword arguments into structured fields."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log_with_context(self, level: int, message: str, exc_info=False, **kwargs):
        extra_fields = dict(kwargs)
        if "request_id" not in extra_fields and has_request_context():
            extra_fields["request_id"] = get_request_id()
        self.logger.log(level, message, exc_info=exc_info, extra={"extra_fields": extra_fields})

    def debug(self, message: str, **kwargs):
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log_with_context(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs):
        self._log_with_context(logging.ERROR, message, exc_info=True, **kwargs)

    def log_auth_event(self, event: str, success: bool, **kwargs):
        level = logging.INFO if success else logging.WARNING
        self._log_with_context(
            level,
            f"Authentication {event}: {'success' if success else 'failure'}",
            event_type="auth_event",
            auth_event=event,
            success=success,
            **kwargs,
        )


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)


def configure_logging(app: Flask):
    """Install the structured formatter on the root logger."""
    json_enabled = bool(app.config.get("LOG_JSON", True))
    log_level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        # pytest's capture handlers must survive so caplog keeps working
        if type(handler) is logging.StreamHandler:
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(StructuredFormatter(json_enabled=json_enabled))
    root_logger.addHandler(console_handler)

    app.logger.setLevel(level)
    for logger_name in PLATFORM_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)

    get_logger("assetshield.config").info(
        "Logging configured",
        json_enabled=json_enabled,
        log_level=log_level,
    )


class LoggingMiddleware:
    """Emits one log line per completed request."""

    def __init__(self, app: Flask):
        self.app = app
        self.logger = get_logger("assetshield.requests")
        app.after_request(self._after_request)

    def _after_request(self, response):
        if request.path in QUIET_PATHS:
            return response

        duration_ms = 0
        if hasattr(g, "request_start_time"):
            duration_ms = round((time.time() - g.request_start_time) * 1000, 2)

        self.logger.info(
            f"{request.method} {request.path} - {response.status_code} ({duration_ms}ms)",
            event_type="request_end",
            status_code=response.status_code,
            duration_ms=duration_ms,
            user_agent=request.headers.get("User-Agent", ""),
        )
        return response


def init_logging(app: Flask):
    configure_logging(app)
    LoggingMiddleware(app)
    get_logger("assetshield.startup").info(
        "Application starting",
        debug=app.debug,
        testing=app.testing,
    )
