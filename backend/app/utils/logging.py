"""Structured logging for LLM calls and lifecycle events."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredLLMLogger:
    """Structured logger for LLM gateway calls."""

    def log_call(
        self,
        operation: str,
        model: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one LLM call with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "model": model,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"LLM call: {operation} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


def log_lifecycle_event(decision_id: str, event: str, **fields: Any) -> None:
    """Log a decision lifecycle transition with structured data."""
    log_data: dict[str, Any] = {"decision_id": decision_id, "event": event, **fields}
    logger.info(f"Decision lifecycle: {event}", extra={"structured": log_data})
