"""Fill in APA citations for the reference-list blocks of an article."""

from __future__ import annotations

from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from ... import logging_manager as log_mgr
from ...observability import reaction_operation
from ...records.store import RecordStore
from ...records.types import BlockKind, ContentBlock, ContentType, RecordVariant, ReferenceEntry
from ..errors import ReactionError, RecordNotFoundError
from ..guard import (
    ContentFingerprints,
    OperationGuard,
    citations_key,
    fingerprint_key,
    fingerprint_record,
)
from ..outcome import ReactionOutcome
from .formatting import is_placeholder, placeholder_citation
from .resolver import BibliographicResolver

logger = log_mgr.get_logger().getChild("services.citations")


def needs_citation(entry: ReferenceEntry) -> bool:
    """An entry is processed when it has a link and no real citation yet."""

    if not entry.link:
        return False
    return not entry.citation or is_placeholder(entry.citation)


class CitationOrchestrator:
    def __init__(
        self,
        store: RecordStore,
        resolver: BibliographicResolver,
        guard: OperationGuard,
        fingerprints: ContentFingerprints,
        *,
        default_locale: str = "en",
        ttl_seconds: float = 120.0,
        content_type: ContentType = ContentType.ARTICLE,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._guard = guard
        self._fingerprints = fingerprints
        self._default_locale = default_locale
        self._ttl = ttl_seconds
        self._content_type = content_type

    async def _load(self, document_id: str, locale: Optional[str]) -> Optional[RecordVariant]:
        if locale:
            return await self._store.find_one(
                self._content_type, {"document_id": document_id, "locale": locale}
            )
        variants = await self._store.find_many(self._content_type, {"document_id": document_id})
        for variant in variants:
            if variant.locale == self._default_locale:
                return variant
        return variants[0] if variants else None

    async def run(self, document_id: str, locale: Optional[str] = None) -> ReactionOutcome:
        key = citations_key(document_id)
        if not self._guard.try_start(key, ttl_seconds=self._ttl):
            return ReactionOutcome.skipped("guard_active", guard_key=key)
        try:
            with log_mgr.log_context(document_id=document_id, guard_key=key), reaction_operation(
                "citation_enrichment", attributes={"document_id": document_id, "locale": locale}
            ):
                return await self._enrich(document_id, locale)
        except ReactionError as exc:
            logger.error(
                "Citation enrichment failed: %s",
                exc,
                extra={"event": "citations.failed", "guard_key": key},
            )
            return ReactionOutcome.from_error(exc, document_id=document_id)
        except Exception as exc:
            logger.exception(
                "Unexpected citation enrichment failure",
                extra={"event": "citations.error", "guard_key": key},
            )
            return ReactionOutcome.failed("unexpected_error", str(exc), document_id=document_id)
        finally:
            self._guard.end(key)

    async def _enrich(self, document_id: str, locale: Optional[str]) -> ReactionOutcome:
        article = await self._load(document_id, locale)
        if article is None:
            raise RecordNotFoundError(f"Article {document_id} not found")

        updated_count = 0
        error_count = 0
        blocks: List[ContentBlock] = article.blocks
        for block in blocks:
            if block.kind != BlockKind.REFERENCE:
                continue
            for entry in block.references:
                if not needs_citation(entry):
                    continue
                link = entry.link or ""
                citation = await run_in_threadpool(self._resolver.cite, link)
                if citation:
                    entry.citation = citation
                    updated_count += 1
                else:
                    entry.citation = placeholder_citation(link)
                    error_count += 1
                    logger.info(
                        "Could not generate APA for %s",
                        link,
                        extra={"event": "citations.placeholder"},
                    )

        if updated_count or error_count:
            if article.document_id and article.locale:
                # Reference text is not fingerprinted, so this write reads as an echo.
                self._fingerprints.remember(
                    fingerprint_key(article.document_id, article.locale),
                    fingerprint_record(article),
                )
            await self._store.update(self._content_type, article.id, {"blocks": blocks})

        return ReactionOutcome.succeeded(
            f"Generated {updated_count} APA citations. "
            f"{error_count} URLs could not be processed.",
            updated_count=updated_count,
            error_count=error_count,
            record_id=article.id,
        )


__all__ = ["CitationOrchestrator", "needs_citation"]
