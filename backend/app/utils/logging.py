"""Structured logging for generation attempts."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredGenerationLogger:
    """Structured logger for credential attempts.

    Credentials are identified by their 1-based position in the pool, never
    by value.
    """

    def log_attempt(
        self,
        mode: str,
        credential_index: int,
        outcome: str,
        latency_ms: float,
        status_code: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one remote generation attempt with structured data."""
        log_data: dict[str, Any] = {
            "mode": mode,
            "credential": credential_index,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if status_code is not None:
            log_data["status_code"] = status_code
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Generation attempt with credential {credential_index} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        elif outcome == "transient":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.error(log_msg, extra={"structured": log_data})
