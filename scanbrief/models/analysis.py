"""
Analysis request and result models
"""
from dataclasses import dataclass, replace
from typing import Any, Optional

from ..services.ai.errors import AnalysisError, ErrorKind


@dataclass(frozen=True)
class AnalysisRequest:
    """
    One incoming analysis call.

    Attributes:
        raw_data: Scan data, either text or any JSON-serializable value
        model_key: Requested logical model key, or None for the default
    """

    raw_data: Any
    model_key: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    """
    Terminal outcome of an analysis.

    Exactly one of ``text`` (success) or ``kind`` (failure) is set.
    """

    text: Optional[str] = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    provider_status: Optional[int] = None
    detail: Optional[str] = None
    model_key: Optional[str] = None
    truncated: bool = False
    original_length: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is None

    @classmethod
    def success(cls, text: str, **extra) -> "AnalysisResult":
        return cls(text=text, **extra)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        provider_status: Optional[int] = None,
        detail: Optional[str] = None,
        **extra
    ) -> "AnalysisResult":
        return cls(
            kind=ErrorKind(kind),
            message=message,
            provider_status=provider_status,
            detail=detail,
            **extra
        )

    @classmethod
    def from_error(cls, error: AnalysisError, **extra) -> "AnalysisResult":
        """Convert a raised AnalysisError into a failure result."""
        return cls.failure(
            error.kind,
            error.message,
            provider_status=error.provider_status,
            detail=error.detail,
            **extra
        )

    def with_context(self, **extra) -> "AnalysisResult":
        """Return a copy with request context (model key, truncation) attached."""
        return replace(self, **extra)
