"""Route record mutation events to the reaction pipelines."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .. import logging_manager as log_mgr
from ..locales import LocaleTable
from ..records.store import RecordStore
from ..records.types import ContentType, MutationAction, MutationEvent, RecordVariant
from .citations import CitationOrchestrator
from .covers import CoverOrchestrator
from .errors import ReactionError, RecordNotFoundError, UnsupportedInputError
from .guard import (
    ContentFingerprints,
    OperationGuard,
    fingerprint_key,
    fingerprint_record,
    translation_key,
)
from .identity import ResolvedIdentity, resolve_identity
from .outcome import ReactionOutcome
from .scheduler import ReactionScheduler
from .slugs import SlugReconciler
from .translation import TranslationOrchestrator
from .validation import validate_before_write

logger = log_mgr.get_logger().getChild("services.dispatcher")


class ReactionDispatcher:
    """Entry point for lifecycle events and explicit triggers.

    Lifecycle handlers never block: they schedule a detached reaction and
    return. Explicit triggers are awaited and report a :class:`ReactionOutcome`.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        scheduler: ReactionScheduler,
        guard: OperationGuard,
        fingerprints: ContentFingerprints,
        locales: LocaleTable,
        translation: TranslationOrchestrator,
        covers: CoverOrchestrator,
        citations: CitationOrchestrator,
        slugs: SlugReconciler,
        default_locale: str = "en",
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._guard = guard
        self._fingerprints = fingerprints
        self._locales = locales
        self._translation = translation
        self._covers = covers
        self._citations = citations
        self._slugs = slugs
        self._default_locale = default_locale

    # Lifecycle hooks -----------------------------------------------------

    def validate_before_write(self, content_type: ContentType, params: Mapping[str, Any]) -> None:
        """Raise :class:`CharacterLimitError` for over-long article fields."""

        if ContentType(content_type) == ContentType.ARTICLE:
            validate_before_write(params, default_locale=self._default_locale)

    def handle_create(self, event: MutationEvent) -> None:
        self._dispatch(event)

    def handle_update(self, event: MutationEvent) -> None:
        self._dispatch(event)

    def handle_event(self, event: MutationEvent) -> None:
        if event.action == MutationAction.CREATE:
            self.handle_create(event)
        else:
            self.handle_update(event)

    def _dispatch(self, event: MutationEvent) -> None:
        record = event.result
        if record is None or not record.id:
            logger.warning(
                "Mutation event without a record id; skipping",
                extra={"event": "dispatcher.skip.no_id"},
            )
            return
        name = f"{event.content_type.value}-{event.action.value}-{record.id}"
        if event.content_type == ContentType.ARTICLE:
            self._scheduler.spawn(self._react_to_article(event), name=name)
        elif event.content_type == ContentType.REPORT:
            self._scheduler.spawn(self._react_to_report(event), name=name)

    async def _react_to_article(self, event: MutationEvent) -> None:
        record = event.result
        with log_mgr.log_context(record_id=record.id, document_id=record.document_id):
            try:
                identity = await self._claim_translation(event)
                current = await self._store.find_one(event.content_type, {"id": record.id})
                if current is None:
                    return
                await self._slugs.reconcile(current, event.content_type)
                if identity is not None:
                    outcome = await self._translation.run(
                        current,
                        identity.source_locale,
                        identity.target_locale,
                    )
                    logger.info(
                        "Automatic translation %s",
                        outcome.status.value,
                        extra={
                            "event": "dispatcher.translation.outcome",
                            "status": outcome.status.value,
                            "reason": outcome.reason,
                        },
                    )
            except Exception:
                logger.exception(
                    "Article reaction failed",
                    extra={"event": "dispatcher.article.error"},
                )

    async def _claim_translation(self, event: MutationEvent) -> Optional[ResolvedIdentity]:
        """Decide whether this event should translate and claim its content.

        The claim happens without suspending between the echo check and the
        remember call, so concurrent duplicates of one change see each other.
        """

        if not self._translation.available:
            logger.debug(
                "Translation provider unavailable; skipping automatic translation",
                extra={"event": "dispatcher.translation.disabled"},
            )
            return None
        identity = await resolve_identity(event, self._store, self._locales)
        if identity is None:
            return None

        forward = translation_key(
            identity.document_id, identity.source_locale, identity.target_locale
        )
        reverse = translation_key(
            identity.document_id, identity.target_locale, identity.source_locale
        )
        if self._guard.is_active(forward) or self._guard.is_active(reverse):
            logger.info(
                "Translation guard active for document %s; skipping",
                identity.document_id,
                extra={"event": "dispatcher.translation.guarded"},
            )
            return None

        key = fingerprint_key(identity.document_id, identity.source_locale)
        fingerprint = fingerprint_record(event.result)
        if self._fingerprints.matches(key, fingerprint):
            logger.info(
                "Content unchanged since the last engine write; skipping translation",
                extra={"event": "dispatcher.translation.echo"},
            )
            return None
        self._fingerprints.remember(key, fingerprint)
        return identity

    async def _react_to_report(self, event: MutationEvent) -> None:
        record = event.result
        with log_mgr.log_context(record_id=record.id, document_id=record.document_id):
            try:
                fresh = await self._store.find_one(event.content_type, {"id": record.id})
                current = fresh or record
                if current.report_file is None or current.cover is not None:
                    return
                outcome = await self._covers.run(current.id, explicit=False)
                logger.info(
                    "Automatic cover extraction %s",
                    outcome.status.value,
                    extra={
                        "event": "dispatcher.cover.outcome",
                        "status": outcome.status.value,
                        "reason": outcome.reason,
                    },
                )
            except Exception:
                logger.exception(
                    "Report reaction failed",
                    extra={"event": "dispatcher.report.error"},
                )

    # Explicit triggers ---------------------------------------------------

    async def trigger_translation(self, record_id: int) -> ReactionOutcome:
        """Translate an article now and reconcile its slug afterwards."""

        try:
            record = await self._require(ContentType.ARTICLE, {"id": record_id})
            source_locale = record.locale
            target_locale = self._locales.target_for(source_locale)
            if not source_locale or not target_locale:
                raise UnsupportedInputError(
                    f"Locale {source_locale!r} has no translation target"
                )
            outcome = await self._translation.run(
                record, source_locale, target_locale, explicit=True
            )
            if outcome.ok:
                await self._slugs.reconcile_by_id(record.id)
            return outcome
        except ReactionError as exc:
            return ReactionOutcome.from_error(exc, record_id=record_id)

    async def trigger_cover_extraction(self, record_id: int) -> ReactionOutcome:
        return await self._covers.run(record_id, explicit=True)

    async def trigger_cover_extraction_for_document(self, document_id: str) -> ReactionOutcome:
        try:
            record = await self._require(ContentType.REPORT, {"document_id": document_id})
        except ReactionError as exc:
            return ReactionOutcome.from_error(exc, document_id=document_id)
        return await self.trigger_cover_extraction(record.id)

    async def trigger_citation_enrichment(
        self, document_id: str, locale: Optional[str] = None
    ) -> ReactionOutcome:
        return await self._citations.run(document_id, locale)

    async def _require(
        self, content_type: ContentType, filters: Mapping[str, Any]
    ) -> RecordVariant:
        record = await self._store.find_one(content_type, filters)
        if record is None:
            raise RecordNotFoundError(f"{content_type.value.capitalize()} not found")
        return record


__all__ = ["ReactionDispatcher"]
