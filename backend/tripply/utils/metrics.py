"""Prometheus metrics for tool execution, video enrichment and chat turns."""

from prometheus_client import Counter, Histogram

from backend.tripply.tools.executor import ToolMetrics

# Tool execution metrics; the top bucket matches the default tool timeout
tool_latency_ms = Histogram(
    "tool_latency_ms",
    "Tool execution latency in milliseconds",
    ["tool", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

tool_errors_total = Counter(
    "tool_errors_total",
    "Total tool execution errors",
    ["tool", "reason"],
)

video_enrichment_total = Counter(
    "video_enrichment_total",
    "Video enrichment steps by outcome (ok, skipped_error, skipped_deadline)",
    ["step", "outcome"],
)

chat_turns_total = Counter(
    "chat_turns_total",
    "Total chat turns by mode and outcome",
    ["mode", "outcome"],
)

chat_turn_seconds = Histogram(
    "chat_turn_seconds",
    "Wall time of a chat turn in seconds",
    ["mode"],
    buckets=[0.5, 1, 2, 5, 10, 20, 40, 80, 120],
)


class PrometheusToolMetrics(ToolMetrics):
    def record_latency(self, tool: str, outcome: str, latency_ms: float) -> None:
        tool_latency_ms.labels(tool=tool, outcome=outcome).observe(latency_ms)

    def inc_error(self, tool: str, reason: str) -> None:
        tool_errors_total.labels(tool=tool, reason=reason).inc()


def record_enrichment(step: str, outcome: str) -> None:
    video_enrichment_total.labels(step=step, outcome=outcome).inc()


def record_turn(mode: str, outcome: str, elapsed_seconds: float | None = None) -> None:
    """Count a finished turn (outcome: done, error, failed) and observe its duration."""
    chat_turns_total.labels(mode=mode, outcome=outcome).inc()
    if elapsed_seconds is not None:
        chat_turn_seconds.labels(mode=mode).observe(elapsed_seconds)
