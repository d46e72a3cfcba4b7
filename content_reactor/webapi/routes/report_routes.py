"""Explicit report triggers."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...services.engine import ReactionEngine
from ..dependencies import get_engine
from ..errors import raise_for_outcome
from ..schemas import ReactionOutcomeResponse

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/{document_id}/extract-cover", response_model=ReactionOutcomeResponse)
async def extract_cover(
    document_id: str,
    engine: ReactionEngine = Depends(get_engine),
) -> ReactionOutcomeResponse:
    """Render page one of the report PDF as its cover, replacing any existing cover."""

    outcome = await engine.dispatcher.trigger_cover_extraction_for_document(document_id)
    return ReactionOutcomeResponse.from_outcome(raise_for_outcome(outcome))


__all__ = ["router"]
