"""Structured logging for tool execution."""

import logging
from typing import Any

from backend.tripply.tools.executor import ToolLogger

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Parameter values longer than this are truncated in log records
_MAX_PARAM_CHARS = 200


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at process start."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _summarize(parameters: dict[str, Any]) -> dict[str, Any]:
    summary: dict[str, Any] = {}
    for key, value in parameters.items():
        if isinstance(value, str) and len(value) > _MAX_PARAM_CHARS:
            value = value[:_MAX_PARAM_CHARS] + "..."
        summary[key] = value
    return summary


class StructuredToolLogger(ToolLogger):
    """Structured logger for tool execution."""

    def log_call(
        self,
        tool: str,
        parameters: dict[str, Any],
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log tool execution with structured data."""
        log_data: dict[str, Any] = {
            "tool": tool,
            "parameters": _summarize(parameters),
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Tool execution: {tool} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
