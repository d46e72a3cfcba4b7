"""Stand-alone translation endpoints that persist nothing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ... import logging_manager as log_mgr
from ...records.types import ContentType
from ...services.engine import ReactionEngine
from ...services.errors import ReactionError
from ..dependencies import get_engine
from ..errors import http_error
from ..schemas import (
    TranslateEntryRequest,
    TranslateEntryResponse,
    TranslateTextRequest,
    TranslateTextResponse,
    TranslateTextResult,
)

logger = log_mgr.get_logger().getChild("webapi.routes.translate")

router = APIRouter(prefix="/translate", tags=["translate"])


@router.post("/text", response_model=TranslateTextResponse)
async def translate_text(
    request: TranslateTextRequest,
    engine: ReactionEngine = Depends(get_engine),
) -> TranslateTextResponse:
    if not request.text or not request.source_lang or not request.target_lang:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: text, sourceLang, targetLang",
        )
    try:
        translated = await engine.translation.translate_text(
            request.text, request.source_lang, request.target_lang
        )
    except ReactionError as exc:
        raise http_error(exc) from exc
    return TranslateTextResponse(
        data=TranslateTextResult(
            original=request.text,
            translated=translated,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
        )
    )


@router.post("/entry", response_model=TranslateEntryResponse)
async def translate_entry(
    request: TranslateEntryRequest,
    engine: ReactionEngine = Depends(get_engine),
) -> TranslateEntryResponse:
    """Return translated fields of a stored record without writing anything."""

    if (
        not request.content_type
        or request.entry_id is None
        or not request.source_locale
        or not request.target_locale
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: contentType, entryId, sourceLocale, targetLocale",
        )
    try:
        content_type = ContentType(request.content_type)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown content type: {request.content_type}",
        ) from exc

    entry = await engine.store.find_one(
        content_type, {"id": request.entry_id, "locale": request.source_locale}
    )
    if entry is None:
        logger.info(
            "Entry not found for translation",
            extra={"event": "translate.entry_missing", "record_id": request.entry_id},
        )
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")

    try:
        data = await engine.translation.translate_entry(
            entry, request.source_locale, request.target_locale, request.fields
        )
    except ReactionError as exc:
        raise http_error(exc) from exc
    return TranslateEntryResponse(data=data)


__all__ = ["router"]
