"""
Structured logging for BillTracker.

Console output plus rotating files under LOG_DIR: ``application.log`` (all
app records), ``error.log`` (errors only) and ``audit.log`` (JSON lines for
user actions and security events). Records emitted inside a request carry
its request id and client address.
"""
import json
import logging
import logging.config
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from flask import g, has_request_context, request

AUDIT_FIELDS = ("user_id", "request_id", "ip_address", "action", "resource", "result", "event_type")

MAX_LOG_BYTES = 10 * 1024 * 1024


def _rotating(log_dir: str, filename: str, level: str, formatter: str, backups: int = 5) -> Dict[str, Any]:
    return {
        "level": level,
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": formatter,
        "filters": ["request_context"],
        "filename": os.path.join(log_dir, filename),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": backups,
        "encoding": "utf-8",
    }


def build_logging_config(log_dir: str, level: str = "INFO") -> Dict[str, Any]:
    """dictConfig mapping whose files live under ``log_dir``."""
    app_handlers = ["console", "file", "error_file"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {"()": "billtracker.utils.logging_utils.RequestContextFilter"},
        },
        "formatters": {
            "standard": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
            "detailed": {"format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d [%(request_id)s] %(message)s"},
            "json": {"()": "billtracker.utils.logging_utils.JSONFormatter"},
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": sys.stdout,
            },
            "file": _rotating(log_dir, "application.log", "DEBUG", "detailed"),
            "error_file": _rotating(log_dir, "error.log", "ERROR", "detailed"),
            "audit_file": _rotating(log_dir, "audit.log", "INFO", "json", backups=10),
        },
        "loggers": {
            "billtracker": {"level": "DEBUG", "handlers": app_handlers, "propagate": False},
            "billtracker.audit": {"level": "INFO", "handlers": ["audit_file"], "propagate": False},
            "billtracker.security": {"level": "INFO", "handlers": app_handlers + ["audit_file"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": ["file"], "propagate": False},
            "werkzeug": {"level": "INFO", "handlers": ["file"], "propagate": False},
            "apscheduler": {"level": "WARNING", "handlers": ["file"], "propagate": False},
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }


class RequestContextFilter(logging.Filter):
    """Stamp records with the current request id and client address."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            if not hasattr(record, "request_id"):
                record.request_id = g.get("request_id", "-")
            if not hasattr(record, "ip_address"):
                record.ip_address = request.remote_addr
        elif not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update({f: getattr(record, f) for f in AUDIT_FIELDS if getattr(record, f, None) not in (None, "-")})
        if hasattr(record, "details"):
            entry["details"] = record.details
        return json.dumps(entry, default=str)


def setup_logging(log_dir: str = "logs", level: str = "INFO") -> logging.Logger:
    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir, level.upper()))
    logger = logging.getLogger("billtracker")
    logger.info("Logging initialized (dir=%s, level=%s)", log_dir, level.upper())
    return logger


def _extra(**fields) -> Dict[str, Any]:
    # None values are left off so the request filter can fill them in
    return {k: v for k, v in fields.items() if v is not None}


class AuditLogger:
    """User actions go to ``billtracker.audit``; security events to ``billtracker.security``."""

    def __init__(self):
        self.logger = logging.getLogger("billtracker.audit")
        self.security_logger = logging.getLogger("billtracker.security")

    def log_user_action(
        self,
        user_id: Optional[str],
        action: str,
        resource: str,
        result: str,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        self.logger.info(
            "User %s %s %s: %s", user_id, action, resource, result,
            extra=_extra(
                user_id=user_id, action=action, resource=resource, result=result,
                details=details or {}, ip_address=ip_address,
            ),
        )

    def log_security_event(
        self,
        event_type: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        description: str = "",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.security_logger.warning(
            "Security event %s: %s", event_type, description,
            extra=_extra(event_type=event_type, user_id=user_id, ip_address=ip_address, details=details or {}),
        )


class PerformanceLogger:
    """Request timings; slow requests are logged at a higher level."""

    SLOW_MS = 2000
    VERY_SLOW_MS = 5000

    def __init__(self):
        self.logger = logging.getLogger("billtracker.performance")

    def _level_for(self, duration_ms: float) -> int:
        if duration_ms > self.VERY_SLOW_MS:
            return logging.WARNING
        if duration_ms > self.SLOW_MS:
            return logging.INFO
        return logging.DEBUG

    def log_request_timing(
        self,
        endpoint: str,
        method: str,
        duration_ms: float,
        status_code: int,
        user_id: Optional[str] = None,
    ) -> None:
        self.logger.log(
            self._level_for(duration_ms),
            "%s %s -> %s in %.2fms", method, endpoint, status_code, duration_ms,
            extra=_extra(
                endpoint=endpoint, method=method, duration_ms=duration_ms,
                status_code=status_code, user_id=user_id,
            ),
        )


audit_logger = AuditLogger()
performance_logger = PerformanceLogger()


def get_logger(name: str) -> logging.Logger:
    """Child of the ``billtracker`` logger."""
    return logging.getLogger(f"billtracker.{name}")
