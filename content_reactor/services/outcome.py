"""Structured result returned by reaction runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .errors import ReactionError


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class ReactionOutcome:
    """Result of one reaction, reported to explicit callers and logs."""

    status: OutcomeStatus
    reason: Optional[str] = None
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED

    @classmethod
    def succeeded(cls, message: Optional[str] = None, **details: Any) -> "ReactionOutcome":
        return cls(OutcomeStatus.SUCCEEDED, message=message, details=details)

    @classmethod
    def skipped(
        cls, reason: str, message: Optional[str] = None, **details: Any
    ) -> "ReactionOutcome":
        return cls(OutcomeStatus.SKIPPED, reason=reason, message=message, details=details)

    @classmethod
    def failed(
        cls, reason: str, message: Optional[str] = None, **details: Any
    ) -> "ReactionOutcome":
        return cls(OutcomeStatus.FAILED, reason=reason, message=message, details=details)

    @classmethod
    def from_error(cls, exc: ReactionError, **details: Any) -> "ReactionOutcome":
        return cls.failed(exc.reason, str(exc), **details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "message": self.message,
            "details": dict(self.details),
        }


__all__ = ["OutcomeStatus", "ReactionOutcome"]
