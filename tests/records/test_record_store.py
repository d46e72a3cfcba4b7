from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from content_reactor.records import media as media_module
from content_reactor.records import (
    DuplicateVariantError,
    InMemoryRecordStore,
    LocalMediaStore,
    UploadMetadata,
)
from content_reactor.records.types import (
    BlockKind,
    ContentBlock,
    ContentType,
    MutationAction,
    RecordVariant,
)

pytestmark = pytest.mark.records

ARTICLE = ContentType.ARTICLE


def test_create_assigns_identity_and_emits_event() -> None:
    store = InMemoryRecordStore()
    events = []
    store.subscribe(events.append)

    async def scenario():
        return await store.create(
            ARTICLE,
            {
                "locale": "en",
                "title": "Hello",
                "blocks": [{"__component": "shared.rich-text", "body": "x"}],
            },
        )

    record = asyncio.run(scenario())

    assert record.id == 1
    assert len(record.document_id) == 24
    assert record.blocks[0].id == 1
    assert [event.action for event in events] == [MutationAction.CREATE]
    assert events[0].params == {
        "data": {
            "locale": "en",
            "title": "Hello",
            "blocks": [{"__component": "shared.rich-text", "body": "x"}],
        }
    }


def test_records_are_copied_and_filters_accept_aliases() -> None:
    store = InMemoryRecordStore()

    async def scenario():
        created = await store.create(ARTICLE, {"documentId": "doc-1", "locale": "en"})
        created.title = "mutated"
        found = await store.find_one(ARTICLE, {"documentId": "doc-1", "locale": "en"})
        many = await store.find_many(ARTICLE, {"document_id": "doc-1"})
        none = await store.find_one(ContentType.REPORT, {"document_id": "doc-1"})
        return found, many, none

    found, many, none = asyncio.run(scenario())

    assert found.title is None
    assert [record.document_id for record in many] == ["doc-1"]
    assert none is None


def test_one_variant_per_document_and_locale() -> None:
    store = InMemoryRecordStore()

    async def scenario():
        await store.create(ARTICLE, {"document_id": "doc", "locale": "en"})
        await store.create(ARTICLE, {"document_id": "doc", "locale": "zh-Hant-HK"})
        await store.create(ARTICLE, {"document_id": "doc", "locale": "en"})

    with pytest.raises(DuplicateVariantError):
        asyncio.run(scenario())


def test_update_merges_fields_and_awaits_async_listeners() -> None:
    store = InMemoryRecordStore()
    seen = []

    async def listener(event):
        seen.append((event.action, event.result.title, dict(event.params)))

    store.subscribe(listener)

    async def scenario():
        record = await store.create(ARTICLE, {"locale": "en", "title": "One", "author": {"id": 4}})
        updated = await store.update(ARTICLE, record.id, {"title": "Two"}, params={"locale": "en"})
        store.unsubscribe(listener)
        await store.update(ARTICLE, record.id, {"title": "Three"})
        return updated

    updated = asyncio.run(scenario())

    assert updated.title == "Two"
    assert updated.author == 4
    assert seen[-1] == (MutationAction.UPDATE, "Two", {"locale": "en"})
    assert len(seen) == 2
    assert store.write_count == 3


def test_update_accepts_camel_and_snake_case_keys() -> None:
    store = InMemoryRecordStore()

    async def scenario():
        record = await store.create(
            ARTICLE,
            {"locale": "en", "title": "One", "publishedAt": "2024-05-01T10:00:00"},
        )
        unpublished = await store.update(ARTICLE, record.id, {"publishedAt": None})
        moved = await store.update(ARTICLE, record.id, {"document_id": "other"})
        return record, unpublished, moved

    record, unpublished, moved = asyncio.run(scenario())

    assert record.published_at is not None
    assert unpublished.published_at is None
    assert moved.document_id == "other"
    assert moved.published_at is None
    assert moved.title == "One"


def test_mirror_upserts_silently_and_replaces_stale_variant() -> None:
    store = InMemoryRecordStore()
    events = []
    store.subscribe(events.append)

    async def scenario():
        stale = await store.create(ARTICLE, {"documentId": "doc-7", "locale": "en", "title": "Old"})
        writes = store.write_count
        mirrored = await store.mirror(
            ARTICLE, {"id": 7, "documentId": "doc-7", "locale": "en", "title": "Hello"}
        )
        merged = await store.mirror(ARTICLE, {"id": 7, "slug": "hello"})
        created = await store.create(ARTICLE, {"documentId": "doc-8", "locale": "en"})
        return stale, writes, mirrored, merged, created

    stale, writes, mirrored, merged, created = asyncio.run(scenario())

    assert mirrored.id == 7
    assert mirrored.title == "Hello"
    assert merged.title == "Hello"
    assert merged.slug == "hello"
    assert store.write_count == writes + 1
    assert [event.action for event in events] == [MutationAction.CREATE, MutationAction.CREATE]
    assert asyncio.run(store.find_one(ARTICLE, {"id": stale.id})) is None
    assert created.id == 8


def test_update_of_missing_record_raises() -> None:
    store = InMemoryRecordStore()

    with pytest.raises(KeyError):
        asyncio.run(store.update(ARTICLE, 5, {"title": "x"}))


def test_record_round_trip_keeps_block_payload_and_camel_case_keys() -> None:
    record = RecordVariant.from_dict(
        {
            "id": "3",
            "documentId": "doc",
            "locale": "en",
            "publishedAt": "2024-05-01T10:00:00",
            "category": {"id": 9, "name": "News"},
            "blocks": [
                {"__component": "shared.slider", "id": 2, "files": [1, 2]},
                {"__component": "shared.reference", "url": [{"link": "https://a", "apa": "<p>A</p>"}]},
            ],
            "seo": {"metaTitle": "x"},
        }
    )

    assert record.id == 3
    assert record.category == 9
    assert record.published_at.year == 2024
    assert record.blocks[0] == ContentBlock(kind=BlockKind.SLIDER, id=2, payload={"files": [1, 2]})
    assert record.blocks[1].references[0].citation == "<p>A</p>"
    assert record.extra == {"seo": {"metaTitle": "x"}}
    assert record.to_dict()["blocks"][1]["url"] == [{"link": "https://a", "citation": "<p>A</p>"}]


def test_local_media_store_copies_file(tmp_path: Path) -> None:
    source = tmp_path / "cover.png"
    source.write_bytes(b"png")
    media = LocalMediaStore(tmp_path / "media", url_prefix="/uploads/")

    asset = asyncio.run(
        media.upload(source, UploadMetadata(name="report_cover.png", caption="Cover"))
    )

    assert asset.id == 1
    assert asset.url == "/uploads/1_report_cover.png"
    assert asset.size == 3
    assert asset.caption == "Cover"
    assert (tmp_path / "media" / "1_report_cover.png").read_bytes() == b"png"
    assert media.uploads == [asset]


def test_local_media_store_copies_off_the_event_loop(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    offloaded = []
    original = media_module.run_in_threadpool

    async def recording(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return await original(func, *args, **kwargs)

    monkeypatch.setattr(media_module, "run_in_threadpool", recording)
    source = tmp_path / "cover.png"
    source.write_bytes(b"png")
    media = LocalMediaStore(tmp_path / "nested" / "media")

    asset = asyncio.run(media.upload(source, UploadMetadata(name="cover.png")))

    assert offloaded == ["_copy"]
    assert asset.size == 3
    assert (tmp_path / "nested" / "media" / "1_cover.png").exists()
