"""Common types shared across all models."""

from datetime import UTC, datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")

ChatMode = Literal["ask", "itinerary"]

Role = Literal["user", "assistant"]


class Coordinates(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Citation(BaseModel):
    """Source backing a piece of tool-provided information."""

    url: str
    title: str
    snippet: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    confidence: float = Field(1.0, ge=0.0, le=1.0)


class ToolResult(BaseModel, Generic[T]):
    """Uniform envelope returned by every tool.

    success=True carries a payload in `data`; success=False carries a
    human-readable `error` and no payload.
    """

    success: bool
    data: T | None = None
    sources: list[Citation] = Field(default_factory=list)
    error: str | None = None
    details: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_envelope(self) -> "ToolResult[T]":
        if self.success and self.data is None:
            raise ValueError("successful tool result must carry data")
        if not self.success:
            if not self.error:
                raise ValueError("failed tool result must carry an error message")
            if self.data is not None:
                raise ValueError("failed tool result must not carry data")
        return self

    @classmethod
    def ok(cls, data: Any, sources: list[Citation] | None = None) -> "ToolResult[T]":
        """Build a successful result."""
        return cls(success=True, data=data, sources=sources or [])

    @classmethod
    def failure(cls, error: str, details: str | None = None) -> "ToolResult[T]":
        """Build a failed result."""
        return cls(success=False, error=error, details=details)
