"""Routes receiving lifecycle notifications from the storage layer."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ... import logging_manager as log_mgr
from ...records.types import ContentType, MutationAction, MutationEvent
from ...services.engine import ReactionEngine
from ...services.errors import CharacterLimitError
from ..dependencies import get_engine
from ..errors import http_error
from ..schemas import (
    BeforeWritePayload,
    LifecycleAcceptedResponse,
    MutationEventPayload,
    ValidationPassedResponse,
)

logger = log_mgr.get_logger().getChild("webapi.routes.lifecycle")

router = APIRouter(prefix="/events", tags=["lifecycle"])


def _content_type(value: str) -> ContentType:
    try:
        return ContentType(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown content type: {value}",
        ) from exc


async def _build_event(
    engine: ReactionEngine,
    content_type: ContentType,
    action: MutationAction,
    payload: MutationEventPayload,
) -> MutationEvent:
    """Mirror the notified record into the engine's store and wrap it as an event."""

    if "id" not in payload.result:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event result must include the record id",
        )
    try:
        record = await engine.store.mirror(content_type, payload.result)
    except (TypeError, ValueError) as exc:
        logger.warning(
            "Rejected malformed lifecycle event",
            extra={
                "event": "lifecycle.malformed",
                "content_type": content_type.value,
                "error": str(exc),
            },
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MutationEvent(
        content_type=content_type, action=action, result=record, params=payload.params
    )


def _validate(content_type: str, payload: BeforeWritePayload, engine: ReactionEngine) -> None:
    try:
        engine.dispatcher.validate_before_write(_content_type(content_type), payload.params)
    except CharacterLimitError as exc:
        logger.info(
            "Write rejected by character limits",
            extra={"event": "lifecycle.validation_failed", "fields": sorted(exc.errors)},
        )
        raise http_error(exc) from exc


@router.post("/{content_type}/before-create", response_model=ValidationPassedResponse)
async def before_create(
    content_type: str,
    payload: BeforeWritePayload,
    engine: ReactionEngine = Depends(get_engine),
) -> ValidationPassedResponse:
    """Reject creates whose fields exceed the per-locale character limits."""

    _validate(content_type, payload, engine)
    return ValidationPassedResponse()


@router.post("/{content_type}/before-update", response_model=ValidationPassedResponse)
async def before_update(
    content_type: str,
    payload: BeforeWritePayload,
    engine: ReactionEngine = Depends(get_engine),
) -> ValidationPassedResponse:
    _validate(content_type, payload, engine)
    return ValidationPassedResponse()


@router.post(
    "/{content_type}/created",
    response_model=LifecycleAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def record_created(
    content_type: str,
    payload: MutationEventPayload,
    engine: ReactionEngine = Depends(get_engine),
) -> LifecycleAcceptedResponse:
    event = await _build_event(
        engine, _content_type(content_type), MutationAction.CREATE, payload
    )
    engine.dispatcher.handle_create(event)
    return LifecycleAcceptedResponse(record_id=event.result.id)


@router.post(
    "/{content_type}/updated",
    response_model=LifecycleAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def record_updated(
    content_type: str,
    payload: MutationEventPayload,
    engine: ReactionEngine = Depends(get_engine),
) -> LifecycleAcceptedResponse:
    event = await _build_event(
        engine, _content_type(content_type), MutationAction.UPDATE, payload
    )
    engine.dispatcher.handle_update(event)
    return LifecycleAcceptedResponse(record_id=event.result.id)


__all__ = ["router"]
