"""Pydantic schemas for the reaction web API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..services.outcome import ReactionOutcome


class MutationEventPayload(BaseModel):
    """Lifecycle notification forwarded by the storage layer."""

    result: Dict[str, Any]
    params: Dict[str, Any] = Field(default_factory=dict)


class BeforeWritePayload(BaseModel):
    """Request parameters of a pending create or update."""

    params: Dict[str, Any] = Field(default_factory=dict)


class LifecycleAcceptedResponse(BaseModel):
    status: str = "accepted"
    record_id: int


class ValidationPassedResponse(BaseModel):
    status: str = "ok"


class ReactionOutcomeResponse(BaseModel):
    """Structured result of an explicit trigger."""

    status: str
    reason: Optional[str] = None
    message: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_outcome(cls, outcome: ReactionOutcome) -> "ReactionOutcomeResponse":
        return cls(**outcome.to_dict())


class CitationEnrichmentRequest(BaseModel):
    locale: Optional[str] = None


class TranslateTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    source_lang: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("source_lang", "sourceLang")
    )
    target_lang: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("target_lang", "targetLang")
    )


class TranslateTextResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original: str
    translated: Optional[str]
    source_lang: str = Field(serialization_alias="sourceLang")
    target_lang: str = Field(serialization_alias="targetLang")


class TranslateTextResponse(BaseModel):
    success: bool = True
    data: TranslateTextResult


class TranslateEntryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("content_type", "contentType")
    )
    entry_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("entry_id", "entryId")
    )
    source_locale: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("source_locale", "sourceLocale")
    )
    target_locale: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("target_locale", "targetLocale")
    )
    fields: Optional[List[str]] = None


class TranslateEntryResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]


__all__ = [
    "BeforeWritePayload",
    "CitationEnrichmentRequest",
    "LifecycleAcceptedResponse",
    "MutationEventPayload",
    "ReactionOutcomeResponse",
    "TranslateEntryRequest",
    "TranslateEntryResponse",
    "TranslateTextRequest",
    "TranslateTextResponse",
    "TranslateTextResult",
    "ValidationPassedResponse",
]
