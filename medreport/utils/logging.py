"""
Structured logging configuration for medreport.
Provides request tracking, latency metrics, and compliance logging.
"""

import asyncio
import logging
import sys
import time
import uuid
from typing import Any, Dict, Optional, Tuple
from contextvars import ContextVar
from datetime import datetime, timezone
import json

from medreport.utils.config import settings, LatencyConfig

# Request context for tracking
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add request context if available
        if request_id := request_id_var.get():
            log_entry["request_id"] = request_id
        if session_id := session_id_var.get():
            log_entry["session_id"] = session_id

        # Add extra fields from record
        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _latency_limits(operation: str) -> Tuple[float, float]:
    """Return the (warning, critical) latency limits in ms for an operation."""
    if "encode" in operation.lower():
        return LatencyConfig.WARNING_ENCODE_LATENCY, LatencyConfig.CRITICAL_ENCODE_LATENCY
    return LatencyConfig.WARNING_CAPTURE_LATENCY, LatencyConfig.CRITICAL_CAPTURE_LATENCY


class LatencyLogger:
    """Specialized logger for latency tracking of capture and encode steps."""

    def __init__(self, name: str = "latency"):
        self.logger = logging.getLogger(name)

    def log_latency(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        backend: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Log operation latency with context."""
        extra_fields = {
            "operation": operation,
            "duration_ms": duration_ms,
            "success": success,
            "backend": backend,
            **kwargs,
        }

        threshold_exceeded = kwargs.get("threshold_exceeded", False)
        warning_ms, critical_ms = _latency_limits(operation)
        if duration_ms > critical_ms:
            level = logging.ERROR
        elif threshold_exceeded or duration_ms > warning_ms:
            level = logging.WARNING
        else:
            level = logging.INFO

        message = f"{operation} completed in {duration_ms:.2f}ms"
        if threshold_exceeded:
            message += " [THRESHOLD EXCEEDED]"
        if not success:
            message += " [FAILED]"

        self.logger.log(level, message, extra={"extra_fields": extra_fields})


class ComplianceLogger:
    """Logger for the audit trail of patient data leaving the system."""

    def __init__(self, name: str = "compliance"):
        self.logger = logging.getLogger(name)

    def log_report_export(
        self,
        session_id: str,
        patient_id: str,
        filename: str,
        success: bool,
        **kwargs,
    ) -> None:
        """Log a report export attempt."""
        extra_fields = {
            "type": "report_export",
            "session_id": session_id,
            "patient_id": patient_id,
            "filename": filename,
            "success": success,
            "timestamp": _utc_timestamp(),
            **kwargs,
        }

        self.logger.info(
            f"Report export: {filename}", extra={"extra_fields": extra_fields}
        )

    def log_data_access(
        self,
        resource_type: str,
        resource_id: str,
        operation: str,
        success: bool,
        **kwargs,
    ) -> None:
        """Log data access for audit trail."""
        extra_fields = {
            "type": "data_access",
            "resource_type": resource_type,
            "resource_id": resource_id,
            "operation": operation,
            "success": success,
            "timestamp": _utc_timestamp(),
            **kwargs,
        }

        self.logger.info(
            f"Data access: {operation} {resource_type}",
            extra={"extra_fields": extra_fields},
        )


def setup_logging() -> None:
    """Configure application logging."""
    if settings.enable_structured_logging:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler for compliance logs
    if settings.compliance_log_file:
        file_handler = logging.FileHandler(settings.compliance_log_file)
        file_handler.setFormatter(formatter)
        compliance_logger = logging.getLogger("compliance")
        compliance_logger.addHandler(file_handler)
        compliance_logger.setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get logger instance with proper configuration."""
    return logging.getLogger(name)


def get_latency_logger() -> LatencyLogger:
    """Get latency logger instance."""
    return LatencyLogger()


def get_compliance_logger() -> ComplianceLogger:
    """Get compliance logger instance."""
    return ComplianceLogger()


class RequestContext:
    """Context manager for request tracking."""

    def __init__(
        self,
        request_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.request_id = request_id or str(uuid.uuid4())
        self.session_id = session_id
        self._tokens = []

    def __enter__(self):
        self._tokens.append(request_id_var.set(self.request_id))
        if self.session_id:
            self._tokens.append(session_id_var.set(self.session_id))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for token in reversed(self._tokens):
            token.var.reset(token)


def _check_threshold(operation: str, duration_ms: float) -> bool:
    """Check if operation duration exceeds configured thresholds."""
    name = operation.lower()
    if "capture" in name:
        return duration_ms > settings.capture_threshold
    if "encode" in name:
        return duration_ms > settings.encode_threshold
    return False


def monitor_latency(operation: str, backend: Optional[str] = None):
    """Decorator to monitor operation latency with threshold checking."""

    def decorator(func):
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            success = True
            try:
                return await func(*args, **kwargs)
            except Exception:
                success = False
                raise
            finally:
                duration_ms = (time.time() - start_time) * 1000
                get_latency_logger().log_latency(
                    operation=operation,
                    duration_ms=duration_ms,
                    success=success,
                    backend=backend,
                    threshold_exceeded=_check_threshold(operation, duration_ms),
                )

        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            success = True
            try:
                return func(*args, **kwargs)
            except Exception:
                success = False
                raise
            finally:
                duration_ms = (time.time() - start_time) * 1000
                get_latency_logger().log_latency(
                    operation=operation,
                    duration_ms=duration_ms,
                    success=success,
                    backend=backend,
                    threshold_exceeded=_check_threshold(operation, duration_ms),
                )

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


# Initialize logging on module import
setup_logging()
