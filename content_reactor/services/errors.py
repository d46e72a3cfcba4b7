"""Exception hierarchy shared by the reaction pipelines."""

from __future__ import annotations

from typing import Dict, Mapping, Optional


class ReactionError(RuntimeError):
    """Base class for reaction failures."""

    reason: str = "reaction_failed"

    def __init__(self, message: str, *, reason: Optional[str] = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class ConfigurationAbsentError(ReactionError):
    """Raised when a feature is disabled because its configuration is missing."""

    reason = "configuration_absent"


class UnsupportedInputError(ReactionError):
    """Raised when the input cannot be processed (wrong MIME type, no locale target)."""

    reason = "unsupported_input"


class ExternalServiceError(ReactionError):
    """Raised when a remote service fails transiently."""

    reason = "external_service_failure"

    def __init__(
        self,
        message: str,
        *,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message, reason=reason)
        self.service = service
        self.status_code = status_code


class DataInconsistencyError(ReactionError):
    """Raised when stored data references something that does not exist."""

    reason = "data_inconsistency"


class RecordNotFoundError(ReactionError):
    """Raised when an expected record does not exist."""

    reason = "record_not_found"


class CharacterLimitError(ReactionError):
    """Raised when translatable fields exceed their per-locale length limits."""

    reason = "character_limit_exceeded"

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        summary = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Character limit validation failed: {summary}")


__all__ = [
    "CharacterLimitError",
    "ConfigurationAbsentError",
    "DataInconsistencyError",
    "ExternalServiceError",
    "ReactionError",
    "RecordNotFoundError",
    "UnsupportedInputError",
]
