"""Keep each article variant's slug equal to its own record id."""

from __future__ import annotations

from typing import Optional

from .. import logging_manager as log_mgr
from ..records.store import RecordStore
from ..records.types import ContentType, RecordVariant
from .guard import OperationGuard, slug_key
from .outcome import ReactionOutcome

logger = log_mgr.get_logger().getChild("services.slugs")


class SlugReconciler:
    """Keep each variant's slug equal to its own record id."""

    def __init__(
        self,
        store: RecordStore,
        guard: OperationGuard,
        *,
        ttl_seconds: float = 60.0,
    ) -> None:
        """Initialize the reconciler.

        Args:
            store: Record store the slug write goes through.
            guard: Guard holding ``slug:<id>`` while the write is in flight.
            ttl_seconds: Lifetime of the guard entry.
        """
        self._store = store
        self._guard = guard
        self._ttl = ttl_seconds

    async def reconcile(
        self,
        record: RecordVariant,
        content_type: ContentType = ContentType.ARTICLE,
    ) -> ReactionOutcome:
        """Write ``slug = str(id)`` when it differs; one extra write at most."""

        expected = record.canonical_slug
        if record.slug == expected:
            return ReactionOutcome.skipped("slug_current")

        key = slug_key(record.id)
        if not self._guard.try_start(key, ttl_seconds=self._ttl):
            return ReactionOutcome.skipped("guard_active", guard_key=key)
        try:
            await self._store.update(content_type, record.id, {"slug": expected})
        finally:
            self._guard.end(key)
        logger.info(
            "Reconciled slug for record %s",
            record.id,
            extra={"event": "slug.updated", "record_id": record.id, "slug": expected},
        )
        return ReactionOutcome.succeeded(slug=expected, previous=record.slug)

    async def reconcile_by_id(
        self, record_id: int, content_type: ContentType = ContentType.ARTICLE
    ) -> Optional[ReactionOutcome]:
        record = await self._store.find_one(content_type, {"id": record_id})
        if record is None:
            return None
        return await self.reconcile(record, content_type)


__all__ = ["SlugReconciler"]
