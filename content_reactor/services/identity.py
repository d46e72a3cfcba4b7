"""Resolve the locale pair and document identity of a mutation event."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .. import logging_manager as log_mgr
from ..locales import LocaleTable
from ..records.store import RecordStore
from ..records.types import MutationEvent

logger = log_mgr.get_logger().getChild("services.identity")


@dataclass(frozen=True, slots=True)
class ResolvedIdentity:
    record_id: int
    document_id: str
    source_locale: str
    target_locale: str


def _locale_from_params(params: Mapping[str, Any]) -> Optional[str]:
    locale = params.get("locale")
    if isinstance(locale, str) and locale.strip():
        return locale.strip()
    data = params.get("data")
    if isinstance(data, Mapping):
        nested = data.get("locale")
        if isinstance(nested, str) and nested.strip():
            return nested.strip()
    return None


async def resolve_source_locale(event: MutationEvent, store: RecordStore) -> Optional[str]:
    """Return the event's locale, falling back to a fresh read of the record.

    The chain is: request locale, request payload locale, result locale, then
    the stored record.
    """

    locale = _locale_from_params(event.params or {})
    if locale:
        return locale
    if event.result.locale:
        return event.result.locale
    fresh = await store.find_one(event.content_type, {"id": event.result.id})
    if fresh is not None and fresh.locale:
        logger.debug(
            "Resolved locale from a fresh read",
            extra={"event": "identity.locale.fresh_read", "record_id": event.result.id},
        )
        return fresh.locale
    return None


async def resolve_identity(
    event: MutationEvent,
    store: RecordStore,
    locales: LocaleTable,
) -> Optional[ResolvedIdentity]:
    """Return the translation identity of ``event`` or ``None`` to skip."""

    record = event.result
    source_locale = await resolve_source_locale(event, store)
    if not source_locale:
        logger.info(
            "Skipping translation: no locale could be resolved",
            extra={"event": "identity.skip.no_locale", "record_id": record.id},
        )
        return None

    target_locale = locales.target_for(source_locale)
    if not target_locale:
        logger.info(
            "Skipping translation: locale %s has no translation target",
            source_locale,
            extra={"event": "identity.skip.no_target", "record_id": record.id},
        )
        return None

    document_id = record.document_id
    if not document_id:
        fresh = await store.find_one(event.content_type, {"id": record.id})
        document_id = fresh.document_id if fresh is not None else None
    if not document_id:
        logger.info(
            "Skipping translation: record has no document id",
            extra={"event": "identity.skip.no_document", "record_id": record.id},
        )
        return None

    return ResolvedIdentity(
        record_id=record.id,
        document_id=document_id,
        source_locale=source_locale,
        target_locale=target_locale,
    )


__all__ = ["ResolvedIdentity", "resolve_identity", "resolve_source_locale"]
