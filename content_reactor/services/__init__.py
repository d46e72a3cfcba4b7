"""Reaction pipelines and their shared infrastructure."""

from .dispatcher import ReactionDispatcher
from .engine import ReactionEngine, build_engine
from .errors import (
    CharacterLimitError,
    ConfigurationAbsentError,
    DataInconsistencyError,
    ExternalServiceError,
    ReactionError,
    RecordNotFoundError,
    UnsupportedInputError,
)
from .guard import ContentFingerprints, InMemoryOperationGuard, OperationGuard
from .outcome import OutcomeStatus, ReactionOutcome
from .scheduler import ReactionScheduler

__all__ = [
    "CharacterLimitError",
    "ConfigurationAbsentError",
    "ContentFingerprints",
    "DataInconsistencyError",
    "ExternalServiceError",
    "InMemoryOperationGuard",
    "OperationGuard",
    "OutcomeStatus",
    "ReactionDispatcher",
    "ReactionEngine",
    "ReactionError",
    "ReactionOutcome",
    "ReactionScheduler",
    "RecordNotFoundError",
    "UnsupportedInputError",
    "build_engine",
]
