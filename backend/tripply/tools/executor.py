"""Async tool executor - validation, timeouts and failure capture.

Tool failures are data, not control flow: `execute` always resolves to a
ToolResult and never lets an implementation's exception escape.
- Unknown tool names fail with "Unknown tool"
- Arguments are validated against the tool's parameter model first
- Each call runs under a hard timeout
- Every call is measured and logged
"""

import asyncio
import json
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from backend.tripply.models.chat import ToolCall, ToolCallRequest
from backend.tripply.models.common import ToolResult
from backend.tripply.tools.registry import ToolRegistry


class ToolCancelledError(Exception):
    """Tool execution was cancelled."""

    pass


class ToolConfigurationError(Exception):
    """Tool cannot run because its provider is not configured."""

    pass


@dataclass
class CancelToken:
    """Token for cooperative cancellation signaling."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def throw_if_cancelled(self) -> None:
        """Raise ToolCancelledError if cancelled."""
        if self.cancelled:
            raise ToolCancelledError("turn cancelled")


# Metrics interface (implemented by utils.metrics)
class ToolMetrics:
    """Interface for tool execution metrics."""

    def record_latency(self, tool: str, outcome: str, latency_ms: float) -> None:
        """Record tool execution latency."""
        pass

    def inc_error(self, tool: str, reason: str) -> None:
        """Increment error counter."""
        pass


# Logging interface (implemented by utils.logging)
class ToolLogger:
    """Interface for structured logging."""

    def log_call(
        self,
        tool: str,
        parameters: dict[str, Any],
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one tool execution."""
        pass


def parse_arguments(raw: str) -> dict[str, Any] | None:
    """Decode model-supplied JSON arguments; None if they are not a JSON object."""
    try:
        parsed = json.loads(raw or "{}")
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class ToolExecutor:
    """Dispatches tool invocations by name to their implementations."""

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        timeout_ms: int = 8000,
        metrics: ToolMetrics | None = None,
        logger: ToolLogger | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            registry: Declared tools
            timeout_ms: Hard timeout per call
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
        """
        self._registry = registry
        self._timeout_seconds = timeout_ms / 1000
        self._metrics = metrics or ToolMetrics()
        self._logger = logger or ToolLogger()

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def execute(
        self,
        name: str,
        parameters: dict[str, Any],
        cancel_token: CancelToken | None = None,
    ) -> ToolResult:
        """Execute a tool by name.

        Args:
            name: Declared tool name
            parameters: Raw parameters supplied by the model
            cancel_token: Cancellation token (optional)

        Returns:
            The tool's ToolResult, or a failed ToolResult describing why the
            call could not complete. Never raises.
        """
        start_time = time.monotonic()

        spec = self._registry.get(name)
        if spec is None:
            return self._fail(name, parameters, start_time, "unknown_tool", f"Unknown tool: {name}")

        try:
            payload = spec.params_model.model_validate(parameters)
        except ValidationError as e:
            return self._fail(
                name,
                parameters,
                start_time,
                "invalid_parameters",
                f"Invalid parameters for tool: {name}",
                details=str(e),
            )

        try:
            if cancel_token is not None:
                cancel_token.throw_if_cancelled()
            result = await asyncio.wait_for(spec.fn(payload), timeout=self._timeout_seconds)
        except TimeoutError:
            return self._fail(
                name,
                parameters,
                start_time,
                "timeout",
                f"Tool {name} timed out",
                details=f"no response within {self._timeout_seconds:g}s",
            )
        except ToolCancelledError as e:
            return self._fail(
                name, parameters, start_time, "cancelled", f"Tool {name} cancelled", str(e)
            )
        except ToolConfigurationError as e:
            return self._fail(
                name,
                parameters,
                start_time,
                "not_configured",
                f"Tool {name} is not available",
                str(e),
            )
        except Exception as e:
            return self._fail(
                name,
                parameters,
                start_time,
                type(e).__name__,
                f"Failed to execute {name}",
                details=str(e) or type(e).__name__,
            )

        if not isinstance(result, ToolResult):
            return self._fail(
                name,
                parameters,
                start_time,
                "malformed_result",
                f"Failed to execute {name}",
                details=f"tool returned {type(result).__name__}, expected ToolResult",
            )

        elapsed_ms = (time.monotonic() - start_time) * 1000
        outcome = "success" if result.success else "error"
        self._metrics.record_latency(name, outcome, elapsed_ms)
        if not result.success:
            self._metrics.inc_error(name, "tool_reported")
        self._logger.log_call(name, parameters, outcome, elapsed_ms, error_reason=result.error)
        return result

    async def run(
        self, request: ToolCallRequest, cancel_token: CancelToken | None = None
    ) -> ToolCall:
        """Execute a model-requested call and record it as a completed ToolCall."""
        parameters = parse_arguments(request.arguments)
        if parameters is None:
            start_time = time.monotonic()
            result = self._fail(
                request.name,
                {},
                start_time,
                "invalid_parameters",
                f"Invalid parameters for tool: {request.name}",
                details="arguments were not a JSON object",
            )
            return ToolCall(id=request.id, tool=request.name, parameters={}, result=result)

        result = await self.execute(request.name, parameters, cancel_token)
        return ToolCall(id=request.id, tool=request.name, parameters=parameters, result=result)

    async def execute_all(
        self,
        requests: Sequence[ToolCallRequest],
        cancel_token: CancelToken | None = None,
    ) -> list[ToolCall]:
        """Run every requested call concurrently and join on all of them.

        Results come back in request order regardless of completion order.
        """
        return list(await asyncio.gather(*(self.run(r, cancel_token) for r in requests)))

    def _fail(
        self,
        name: str,
        parameters: dict[str, Any],
        start_time: float,
        reason: str,
        error: str,
        details: str | None = None,
    ) -> ToolResult:
        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.record_latency(name, reason, elapsed_ms)
        self._metrics.inc_error(name, reason)
        self._logger.log_call(name, parameters, reason, elapsed_ms, error_reason=details or error)
        return ToolResult.failure(error, details=details)
