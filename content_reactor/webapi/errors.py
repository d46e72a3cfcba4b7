"""Translate reaction failures into HTTP errors."""

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..services.errors import (
    CharacterLimitError,
    ConfigurationAbsentError,
    DataInconsistencyError,
    ExternalServiceError,
    ReactionError,
    RecordNotFoundError,
    UnsupportedInputError,
)
from ..services.outcome import OutcomeStatus, ReactionOutcome

_STATUS_BY_REASON: Dict[str, int] = {
    RecordNotFoundError.reason: status.HTTP_404_NOT_FOUND,
    UnsupportedInputError.reason: status.HTTP_400_BAD_REQUEST,
    ConfigurationAbsentError.reason: status.HTTP_400_BAD_REQUEST,
    DataInconsistencyError.reason: status.HTTP_422_UNPROCESSABLE_ENTITY,
    CharacterLimitError.reason: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ExternalServiceError.reason: status.HTTP_502_BAD_GATEWAY,
}


def status_for_reason(reason: str | None) -> int:
    return _STATUS_BY_REASON.get(reason or "", status.HTTP_500_INTERNAL_SERVER_ERROR)


def raise_for_outcome(outcome: ReactionOutcome) -> ReactionOutcome:
    """Raise :class:`HTTPException` for failed outcomes, otherwise pass through."""

    if outcome.status == OutcomeStatus.FAILED:
        raise HTTPException(
            status_code=status_for_reason(outcome.reason),
            detail=outcome.to_dict(),
        )
    return outcome


def _error_detail(exc: ReactionError) -> Dict[str, object]:
    detail: Dict[str, object] = {"reason": exc.reason, "message": str(exc)}
    if isinstance(exc, CharacterLimitError):
        detail["errors"] = exc.errors
    return detail


def http_error(exc: ReactionError) -> HTTPException:
    return HTTPException(status_code=status_for_reason(exc.reason), detail=_error_detail(exc))


async def _handle_reaction_error(_request: Request, exc: ReactionError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for_reason(exc.reason), content={"detail": _error_detail(exc)}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render uncaught :class:`ReactionError`s with their mapped status code."""

    app.add_exception_handler(ReactionError, _handle_reaction_error)


__all__ = [
    "http_error",
    "raise_for_outcome",
    "register_exception_handlers",
    "status_for_reason",
]
