"""Record storage contract and an in-memory reference implementation."""

from __future__ import annotations

import asyncio
import copy
import uuid
from abc import ABC, abstractmethod
from dataclasses import fields
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from .. import logging_manager as log_mgr
from .types import (
    ContentBlock,
    ContentType,
    MutationAction,
    MutationEvent,
    RecordVariant,
)

logger = log_mgr.get_logger().getChild("records.store")

MutationListener = Callable[[MutationEvent], Union[None, Awaitable[None]]]

_RECORD_FIELDS = {f.name for f in fields(RecordVariant)}
_FIELD_ALIASES = {
    "documentId": "document_id",
    "publishedAt": "published_at",
    "contentType": "content_type",
}


class DuplicateVariantError(ValueError):
    """Raised when a write would create a second variant for one locale."""


class RecordStore(ABC):
    """Abstract storage collaborator for locale-specific record variants."""

    @abstractmethod
    async def find_one(
        self, content_type: ContentType, filters: Mapping[str, Any]
    ) -> Optional[RecordVariant]:
        """Return the first record matching ``filters`` or ``None``."""

    @abstractmethod
    async def find_many(
        self, content_type: ContentType, filters: Mapping[str, Any]
    ) -> List[RecordVariant]:
        """Return every record matching ``filters``."""

    @abstractmethod
    async def update(
        self,
        content_type: ContentType,
        record_id: int,
        data: Mapping[str, Any],
    ) -> RecordVariant:
        """Apply ``data`` to the record and return the stored result."""

    @abstractmethod
    async def create(
        self, content_type: ContentType, data: Mapping[str, Any]
    ) -> RecordVariant:
        """Persist a new record built from ``data`` and return it."""

    async def mirror(
        self, content_type: ContentType, data: Mapping[str, Any]
    ) -> RecordVariant:
        """Reflect a record written by another system and return the local view.

        Called with the payload of an incoming lifecycle notification before it
        is dispatched. Stores that are themselves the system of record have
        nothing to copy, so the default simply parses ``data``.

        Args:
            content_type: Content type of the notified record.
            data: Record payload as delivered by the notification; must carry
                ``id``.

        Returns:
            The record the reactions should work on.
        """

        return RecordVariant.from_dict(data, content_type=ContentType(content_type))


def _normalise_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    normalised: Dict[str, Any] = {}
    for key, value in data.items():
        normalised[_FIELD_ALIASES.get(key, key)] = value
    return normalised


def _merge(
    current: RecordVariant, data: Mapping[str, Any], content_type: ContentType
) -> RecordVariant:
    # Both sides use snake_case keys so the incoming value always wins.
    merged = _normalise_data(current.to_dict())
    merged.update(_normalise_data(data))
    merged["id"] = current.id
    if "blocks" in data:
        merged["blocks"] = [
            block if isinstance(block, ContentBlock) else ContentBlock.from_dict(block)
            for block in data["blocks"] or []
        ]
    return RecordVariant.from_dict(merged, content_type=content_type)


def _matches(record: RecordVariant, filters: Mapping[str, Any]) -> bool:
    for key, expected in _normalise_data(filters).items():
        if key in _RECORD_FIELDS:
            actual = getattr(record, key)
        else:
            actual = record.extra.get(key)
        if isinstance(actual, ContentType):
            actual = actual.value
        if actual != expected:
            return False
    return True


class InMemoryRecordStore(RecordStore):
    """Keep records in process memory and emit mutation events after writes.

    Records handed out are deep copies so callers never mutate stored state by
    accident. Subscribers receive a :class:`MutationEvent` after every
    ``create``/``update``; coroutine subscribers are awaited in order.
    """

    def __init__(self) -> None:
        self._records: Dict[ContentType, Dict[int, RecordVariant]] = {}
        self._next_id = 1
        self._listeners: List[MutationListener] = []
        self._lock = asyncio.Lock()
        self.write_count = 0

    def subscribe(self, listener: MutationListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: MutationListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _bucket(self, content_type: ContentType) -> Dict[int, RecordVariant]:
        return self._records.setdefault(ContentType(content_type), {})

    async def find_one(
        self, content_type: ContentType, filters: Mapping[str, Any]
    ) -> Optional[RecordVariant]:
        for record in self._bucket(content_type).values():
            if _matches(record, filters):
                return copy.deepcopy(record)
        return None

    async def find_many(
        self, content_type: ContentType, filters: Mapping[str, Any]
    ) -> List[RecordVariant]:
        return [
            copy.deepcopy(record)
            for record in self._bucket(content_type).values()
            if _matches(record, filters)
        ]

    async def create(
        self,
        content_type: ContentType,
        data: Mapping[str, Any],
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> RecordVariant:
        content_type = ContentType(content_type)
        payload = _normalise_data(data)
        async with self._lock:
            record_id = self._next_id
            self._next_id += 1
            payload["id"] = record_id
            if not payload.get("document_id"):
                payload["document_id"] = uuid.uuid4().hex[:24]
            record = RecordVariant.from_dict(payload, content_type=content_type)
            self._assign_block_ids(record)
            self._check_unique(content_type, record)
            self._bucket(content_type)[record_id] = record
            self.write_count += 1
            stored = copy.deepcopy(record)
        logger.debug(
            "Created %s record %s",
            content_type.value,
            record_id,
            extra={"event": "store.create", "record_id": record_id},
        )
        await self._emit(
            MutationEvent(
                content_type=content_type,
                action=MutationAction.CREATE,
                result=copy.deepcopy(stored),
                params=dict(params or {"data": dict(data)}),
            )
        )
        return stored

    async def update(
        self,
        content_type: ContentType,
        record_id: int,
        data: Mapping[str, Any],
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> RecordVariant:
        content_type = ContentType(content_type)
        async with self._lock:
            current = self._bucket(content_type).get(int(record_id))
            if current is None:
                raise KeyError(f"{content_type.value} record {record_id} does not exist")
            record = _merge(current, data, content_type)
            self._assign_block_ids(record)
            self._check_unique(content_type, record)
            self._bucket(content_type)[record.id] = record
            self.write_count += 1
            stored = copy.deepcopy(record)
        logger.debug(
            "Updated %s record %s",
            content_type.value,
            record_id,
            extra={"event": "store.update", "record_id": record_id, "fields": sorted(data)},
        )
        await self._emit(
            MutationEvent(
                content_type=content_type,
                action=MutationAction.UPDATE,
                result=copy.deepcopy(stored),
                params=dict(params or {"data": dict(data)}),
            )
        )
        return stored

    async def mirror(
        self, content_type: ContentType, data: Mapping[str, Any]
    ) -> RecordVariant:
        """Upsert an externally written record without emitting an event.

        Fields absent from ``data`` keep their stored values. Any other variant
        holding the same ``(document_id, locale)`` is dropped.
        """

        content_type = ContentType(content_type)
        async with self._lock:
            bucket = self._bucket(content_type)
            current = bucket.get(int(data["id"]))
            if current is None:
                record = RecordVariant.from_dict(_normalise_data(data), content_type=content_type)
            else:
                record = _merge(current, data, content_type)
            for other_id, other in list(bucket.items()):
                if (
                    other_id != record.id
                    and record.document_id is not None
                    and other.document_id == record.document_id
                    and other.locale == record.locale
                ):
                    del bucket[other_id]
            self._assign_block_ids(record)
            bucket[record.id] = record
            self._next_id = max(self._next_id, record.id + 1)
            stored = copy.deepcopy(record)
        logger.debug(
            "Mirrored %s record %s",
            content_type.value,
            record.id,
            extra={"event": "store.mirror", "record_id": record.id},
        )
        return stored

    def _assign_block_ids(self, record: RecordVariant) -> None:
        used = {block.id for block in record.blocks if block.id is not None}
        next_id = max(used, default=0) + 1
        for block in record.blocks:
            if block.id is None:
                block.id = next_id
                next_id += 1

    def _check_unique(self, content_type: ContentType, record: RecordVariant) -> None:
        if record.document_id is None or record.locale is None:
            return
        for other in self._bucket(content_type).values():
            if other.id == record.id:
                continue
            if other.document_id == record.document_id and other.locale == record.locale:
                raise DuplicateVariantError(
                    f"document {record.document_id} already has a {record.locale} variant"
                )

    async def _emit(self, event: MutationEvent) -> None:
        for listener in list(self._listeners):
            outcome = listener(event)
            if asyncio.iscoroutine(outcome):
                await outcome


__all__ = [
    "DuplicateVariantError",
    "InMemoryRecordStore",
    "MutationListener",
    "RecordStore",
]
