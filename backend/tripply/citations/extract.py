"""Citation extraction from tool results.

Citations are pooled from every tool call of a turn in call order. They are
not deduplicated: the same source may be cited by more than one tool.
"""

from collections.abc import Sequence

from backend.tripply.models.chat import ToolCall
from backend.tripply.models.common import Citation


def extract_citations(tool_calls: Sequence[ToolCall]) -> list[Citation]:
    """Pool the sources of every tool result, successful or not.

    Args:
        tool_calls: Completed tool calls of one turn

    Returns:
        All citations, in tool-call order then source order
    """
    citations: list[Citation] = []
    for call in tool_calls:
        citations.extend(call.result.sources)
    return citations
