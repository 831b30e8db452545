"""Core schemas for application analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ResultSource = Literal["assistant", "fallback", "error"]
RunStatus = Literal[
    "queued",
    "in_progress",
    "requires_action",
    "completed",
    "failed",
    "cancelled",
    "expired",
    "unknown",
]

PENDING_RUN_STATUSES = frozenset({"queued", "in_progress", "requires_action"})
FAILED_RUN_STATUSES = frozenset({"failed", "cancelled", "expired"})


@dataclass(frozen=True, slots=True)
class AssistantConfig:
    """Immutable credential snapshot read once at startup."""

    api_key: str | None
    organization_id: str | None
    assistant_id: str | None
    base_url: str = "https://api.openai.com/v1"
    timeout_sec: int = 30
    source: str | None = None

    def __repr__(self) -> str:
        # Keep secrets out of tracebacks and log lines.
        return (
            f"AssistantConfig(api_key={'set' if self.api_key else None!r}, "
            f"organization_id={'set' if self.organization_id else None!r}, "
            f"assistant_id={self.assistant_id!r}, base_url={self.base_url!r})"
        )


@dataclass(slots=True)
class ValidationReport:
    is_valid: bool
    missing_sections: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    word_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "missing_sections": list(self.missing_sections),
            "issues": list(self.issues),
            "word_count": self.word_count,
        }


@dataclass(slots=True)
class ConfigReport:
    is_valid: bool
    issues: list[str]
    masked_config: dict[str, str | None]
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "issues": list(self.issues),
            "config": dict(self.masked_config),
            "source": self.source,
        }


@dataclass(slots=True)
class ParsedResponse:
    recruiter_analysis: str
    candidate_email: str
    separator: str | None = None


@dataclass(slots=True)
class AnalysisResult:
    """The only artifact that leaves `AnalysisOrchestrator.analyze_application`."""

    success: bool
    recruiter_analysis: str
    candidate_email: str
    match_score: int
    validation: ValidationReport
    error_message: str | None = None
    source: ResultSource = "assistant"
    conversation_id: str | None = None
    raw_output: str | None = None

    def __post_init__(self) -> None:
        if not self.recruiter_analysis.strip():
            raise ValueError("AnalysisResult.recruiter_analysis must be non-empty.")
        if not self.candidate_email.strip():
            raise ValueError("AnalysisResult.candidate_email must be non-empty.")
        if not 0 <= self.match_score <= 100:
            raise ValueError("AnalysisResult.match_score must be within 0..100.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "recruiter_analysis": self.recruiter_analysis,
            "candidate_email": self.candidate_email,
            "match_score": self.match_score,
            "validation": self.validation.to_dict(),
            "error_message": self.error_message,
            "source": self.source,
            "conversation_id": self.conversation_id,
        }
