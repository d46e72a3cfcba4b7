"""Translation orchestration between sibling locale variants."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from fastapi.concurrency import run_in_threadpool

from .. import logging_manager as log_mgr
from ..observability import reaction_operation
from ..records.store import RecordStore
from ..records.types import (
    TRANSLATABLE_BLOCK_FIELDS,
    TRANSLATABLE_FIELDS,
    ContentBlock,
    ContentType,
    RecordVariant,
)
from .errors import ConfigurationAbsentError, DataInconsistencyError, ReactionError
from .guard import (
    ContentFingerprints,
    OperationGuard,
    fingerprint_key,
    fingerprint_record,
    translation_key,
)
from .outcome import ReactionOutcome
from .translation_providers import Translator

logger = log_mgr.get_logger().getChild("services.translation")


class TranslationOrchestrator:
    """Translate a source variant and upsert its sibling in the target locale.

    At most one run per ``(document, direction)`` is in flight; the run claims
    ``translate:<documentId>:<src>-><tgt>`` and releases it when done. Before
    writing, the content of both variants is remembered in ``fingerprints`` so
    the mutation events caused by the write are recognised as echoes.
    """

    def __init__(
        self,
        store: RecordStore,
        translator: Translator,
        guard: OperationGuard,
        fingerprints: ContentFingerprints,
        *,
        content_type: ContentType = ContentType.ARTICLE,
        ttl_seconds: float = 60.0,
    ) -> None:
        self._store = store
        self._translator = translator
        self._guard = guard
        self._fingerprints = fingerprints
        self._content_type = content_type
        self._ttl = ttl_seconds

    @property
    def available(self) -> bool:
        return self._translator.is_available

    def _require_translator(self) -> None:
        if not self._translator.is_available:
            raise ConfigurationAbsentError("Translation provider credentials are not configured")

    async def translate_text(
        self, text: Optional[str], source_locale: str, target_locale: str
    ) -> Optional[str]:
        """Translate one string; blank input comes back untouched."""

        self._require_translator()
        if text is None or not text.strip():
            return text
        return await run_in_threadpool(self._translator.translate, text, source_locale, target_locale)

    async def translate_fields(
        self,
        record: RecordVariant,
        source_locale: str,
        target_locale: str,
        fields: Iterable[str] = TRANSLATABLE_FIELDS,
    ) -> Dict[str, Optional[str]]:
        translated: Dict[str, Optional[str]] = {}
        for name in fields:
            value = getattr(record, name, None)
            if not value:
                continue
            translated[name] = await self.translate_text(value, source_locale, target_locale)
        return translated

    async def translate_blocks(
        self,
        blocks: Iterable[ContentBlock],
        source_locale: str,
        target_locale: str,
    ) -> List[ContentBlock]:
        """Translate text-bearing blocks; every block loses its per-variant id."""

        result: List[ContentBlock] = []
        for block in blocks:
            copy = block.without_identity()
            for name in TRANSLATABLE_BLOCK_FIELDS.get(block.kind, ()):
                value = getattr(block, name)
                if value:
                    setattr(copy, name, await self.translate_text(value, source_locale, target_locale))
            result.append(copy)
        return result

    async def translate_entry(
        self,
        record: RecordVariant,
        source_locale: str,
        target_locale: str,
        fields: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Return translated values for ``fields`` of ``record`` without saving anything."""

        requested = list(fields) if fields is not None else [*TRANSLATABLE_FIELDS, "blocks"]
        scalar_fields = [name for name in requested if name in TRANSLATABLE_FIELDS]
        payload: Dict[str, Any] = dict(
            await self.translate_fields(record, source_locale, target_locale, scalar_fields)
        )
        if "blocks" in requested and record.blocks:
            blocks = await self.translate_blocks(record.blocks, source_locale, target_locale)
            payload["blocks"] = [block.to_dict() for block in blocks]
        return payload

    async def run(
        self,
        source: RecordVariant,
        source_locale: str,
        target_locale: str,
        *,
        explicit: bool = False,
    ) -> ReactionOutcome:
        """Create or refresh the ``target_locale`` sibling of ``source``.

        Args:
            source: The record variant whose text is translated.
            source_locale: Locale the text is written in.
            target_locale: Locale of the sibling to create or update.
            explicit: ``True`` for operator-triggered runs. Missing credentials
                and a missing ``documentId`` then fail instead of skipping.

        Returns:
            A :class:`ReactionOutcome`; failures are reported, never raised.
        """

        document_id = source.document_id
        if not document_id:
            if explicit:
                return ReactionOutcome.from_error(
                    DataInconsistencyError("Record has no documentId"), record_id=source.id
                )
            return ReactionOutcome.skipped("no_document_id")

        if not self._translator.is_available:
            error = ConfigurationAbsentError("Translation provider credentials are not configured")
            if explicit:
                return ReactionOutcome.from_error(error)
            logger.info(
                "Translation disabled; skipping",
                extra={"event": "translation.skip.disabled", "record_id": source.id},
            )
            return ReactionOutcome.skipped(error.reason)

        key = translation_key(document_id, source_locale, target_locale)
        reverse_key = translation_key(document_id, target_locale, source_locale)
        if self._guard.is_active(reverse_key) or not self._guard.try_start(key, ttl_seconds=self._ttl):
            logger.info(
                "Translation already in progress; skipping",
                extra={"event": "translation.skip.guard", "guard_key": key, "record_id": source.id},
            )
            return ReactionOutcome.skipped("guard_active", guard_key=key)

        source_fp_key = fingerprint_key(document_id, source_locale)
        self._fingerprints.remember(source_fp_key, fingerprint_record(source))
        attributes = {
            "record_id": source.id,
            "document_id": document_id,
            "source_locale": source_locale,
            "target_locale": target_locale,
            "explicit": explicit,
        }
        try:
            with log_mgr.log_context(
                record_id=source.id, document_id=document_id, guard_key=key
            ), reaction_operation("translation", attributes=attributes):
                target, created = await self._translate_and_store(
                    source, document_id, source_locale, target_locale
                )
        except ReactionError as exc:
            self._fingerprints.forget(source_fp_key)
            logger.error(
                "Translation failed: %s",
                exc,
                extra={"event": "translation.failed", "guard_key": key, "record_id": source.id},
            )
            return ReactionOutcome.from_error(exc, guard_key=key)
        except Exception as exc:
            self._fingerprints.forget(source_fp_key)
            logger.exception(
                "Unexpected translation failure",
                extra={"event": "translation.error", "guard_key": key, "record_id": source.id},
            )
            return ReactionOutcome.failed("unexpected_error", str(exc), guard_key=key)
        finally:
            self._guard.end(key)

        return ReactionOutcome.succeeded(
            f"{'Created' if created else 'Updated'} {target_locale} variant",
            action="created" if created else "updated",
            target_id=target.id,
            target_locale=target_locale,
            slug=target.slug,
        )

    async def _translate_and_store(
        self,
        source: RecordVariant,
        document_id: str,
        source_locale: str,
        target_locale: str,
    ) -> tuple[RecordVariant, bool]:
        fields = await self.translate_fields(source, source_locale, target_locale)
        blocks = await self.translate_blocks(source.blocks, source_locale, target_locale)
        target_fp_key = fingerprint_key(document_id, target_locale)

        existing = await self._store.find_one(
            self._content_type, {"document_id": document_id, "locale": target_locale}
        )
        if existing is not None:
            expected = replace(existing, blocks=blocks, **fields)
            self._fingerprints.remember(target_fp_key, fingerprint_record(expected))
            updated = await self._store.update(
                self._content_type,
                existing.id,
                {**fields, "blocks": blocks, "slug": existing.canonical_slug},
            )
            logger.info(
                "Updated existing %s variant %s",
                target_locale,
                existing.id,
                extra={"event": "translation.target.updated", "target_id": existing.id},
            )
            return updated, False

        draft = RecordVariant(
            id=0,
            document_id=document_id,
            content_type=self._content_type,
            locale=target_locale,
            blocks=blocks,
            **fields,
        )
        self._fingerprints.remember(target_fp_key, fingerprint_record(draft))
        created = await self._store.create(
            self._content_type,
            {
                **fields,
                "blocks": blocks,
                "document_id": document_id,
                "locale": target_locale,
                "published_at": None,
                "author": source.author,
                "category": source.category,
                "cover": source.cover,
            },
        )
        finalized = await self._store.update(
            self._content_type, created.id, {"slug": created.canonical_slug}
        )
        logger.info(
            "Created %s variant %s as draft",
            target_locale,
            created.id,
            extra={"event": "translation.target.created", "target_id": created.id},
        )
        return finalized, True


__all__ = ["TranslationOrchestrator"]
