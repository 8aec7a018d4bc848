"""Structured logging for backend requests."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class RequestLogger:
    """Interface for request attempt logging (no-op default)."""

    def log_attempt(
        self,
        method: str,
        path: str,
        attempt: int,
        outcome: str,
        latency_ms: float,
        status: int | None = None,
        error_kind: str | None = None,
    ) -> None:
        """Log a single request attempt."""
        pass


class StructuredRequestLogger(RequestLogger):
    """Structured logger for backend request attempts."""

    def log_attempt(
        self,
        method: str,
        path: str,
        attempt: int,
        outcome: str,
        latency_ms: float,
        status: int | None = None,
        error_kind: str | None = None,
    ) -> None:
        """Log request attempt with structured data."""
        log_data: dict[str, Any] = {
            "method": method,
            "path": path,
            "attempt": attempt,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if status is not None:
            log_data["status"] = status
        if error_kind:
            log_data["error_kind"] = error_kind

        log_msg = f"Request {method} {path} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
