"""Explicit article triggers: translation and APA citation generation."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends

from ...services.engine import ReactionEngine
from ..dependencies import get_engine
from ..errors import raise_for_outcome
from ..schemas import CitationEnrichmentRequest, ReactionOutcomeResponse

router = APIRouter(prefix="/articles", tags=["articles"])


@router.post("/{record_id}/translate", response_model=ReactionOutcomeResponse)
async def translate_article(
    record_id: int,
    engine: ReactionEngine = Depends(get_engine),
) -> ReactionOutcomeResponse:
    """Translate the article into its sibling locale, creating it if missing."""

    outcome = await engine.dispatcher.trigger_translation(record_id)
    return ReactionOutcomeResponse.from_outcome(raise_for_outcome(outcome))


@router.post("/{document_id}/generate-apa", response_model=ReactionOutcomeResponse)
async def generate_apa(
    document_id: str,
    payload: Optional[CitationEnrichmentRequest] = Body(default=None),
    engine: ReactionEngine = Depends(get_engine),
) -> ReactionOutcomeResponse:
    """Fill missing or placeholder citations of the article's reference blocks."""

    locale = payload.locale if payload is not None else None
    outcome = await engine.dispatcher.trigger_citation_enrichment(document_id, locale)
    return ReactionOutcomeResponse.from_outcome(raise_for_outcome(outcome))


__all__ = ["router"]
