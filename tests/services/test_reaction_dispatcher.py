from __future__ import annotations

import asyncio

import pytest

from content_reactor.locales import LocaleTable
from content_reactor.records import InMemoryRecordStore
from content_reactor.records.types import (
    ContentType,
    MutationAction,
    MutationEvent,
    RecordVariant,
)
from content_reactor.services.engine import ReactionEngine, build_engine
from content_reactor.services.errors import CharacterLimitError
from content_reactor.services.guard import InMemoryOperationGuard
from content_reactor.services.identity import resolve_identity, resolve_source_locale
from content_reactor.services.scheduler import ReactionScheduler
from content_reactor.services.slugs import SlugReconciler

pytestmark = pytest.mark.dispatcher

ARTICLE = ContentType.ARTICLE


def _event(record: RecordVariant, **params) -> MutationEvent:
    return MutationEvent(
        content_type=record.content_type,
        action=MutationAction.UPDATE,
        result=record,
        params=params,
    )


def test_lifecycle_handlers_return_before_reaction_runs(engine: ReactionEngine) -> None:
    async def scenario():
        record = await engine.store.create(ARTICLE, {"locale": "en", "title": "Hi"})
        pending = engine.scheduler.pending
        await engine.drain()
        return pending, await engine.store.find_one(ARTICLE, {"id": record.id})

    pending, stored = asyncio.run(scenario())

    assert pending == 1
    assert stored.slug == str(stored.id)


def test_reaction_errors_are_logged_not_raised(
    engine: ReactionEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def boom(*args, **kwargs):
        raise RuntimeError("store offline")

    async def scenario():
        record = await engine.store.create(ARTICLE, {"locale": "en", "title": "Hi"})
        await engine.drain()
        monkeypatch.setattr(engine.store, "find_one", boom)
        engine.dispatcher.handle_update(_event(record))
        await engine.drain()
        return engine.scheduler.pending

    assert asyncio.run(scenario()) == 0


def test_event_without_record_id_is_ignored(engine: ReactionEngine) -> None:
    async def scenario():
        engine.dispatcher.handle_create(
            MutationEvent(
                content_type=ARTICLE,
                action=MutationAction.CREATE,
                result=RecordVariant(id=0, document_id=None),
            )
        )
        return engine.scheduler.pending

    assert asyncio.run(scenario()) == 0


def test_validate_before_write_applies_to_articles_only(engine: ReactionEngine) -> None:
    params = {"locale": "zh-Hant-HK", "data": {"title": "字" * 46}}

    with pytest.raises(CharacterLimitError) as excinfo:
        engine.dispatcher.validate_before_write(ARTICLE, params)

    assert excinfo.value.errors == {"title": "Exceeds 45 character limit by 1 (current: 46)"}
    engine.dispatcher.validate_before_write(ContentType.REPORT, params)


def test_engine_rejects_unknown_overrides(settings) -> None:
    with pytest.raises(TypeError, match="bogus"):
        build_engine(settings, bogus=object())


def test_source_locale_resolution_chain() -> None:
    store = InMemoryRecordStore()

    async def scenario():
        stored = await store.create(ARTICLE, {"locale": "zh-Hant-HK", "title": "x"})
        bare = RecordVariant(id=stored.id, document_id=None)
        return (
            await resolve_source_locale(_event(bare, locale="en"), store),
            await resolve_source_locale(_event(bare, data={"locale": "en-GB"}), store),
            await resolve_source_locale(
                _event(RecordVariant(id=stored.id, document_id=None, locale="fr")), store
            ),
            await resolve_source_locale(_event(bare), store),
            await resolve_identity(_event(bare), store, LocaleTable()),
        )

    explicit, nested, result, fresh, identity = asyncio.run(scenario())

    assert (explicit, nested, result, fresh) == ("en", "en-GB", "fr", "zh-Hant-HK")
    assert identity.source_locale == "zh-Hant-HK"
    assert identity.target_locale == "en"
    assert identity.document_id


def test_identity_skips_unknown_locale_and_missing_record() -> None:
    store = InMemoryRecordStore()

    async def scenario():
        return (
            await resolve_identity(
                _event(RecordVariant(id=1, document_id="d", locale="fr")), store, LocaleTable()
            ),
            await resolve_identity(
                _event(RecordVariant(id=42, document_id=None)), store, LocaleTable()
            ),
        )

    assert asyncio.run(scenario()) == (None, None)


def test_locale_table_directions() -> None:
    table = LocaleTable(english_locale="en", chinese_locale="zh-Hant-HK")

    assert table.target_for("en") == "zh-Hant-HK"
    assert table.target_for("EN") == "zh-Hant-HK"
    assert table.target_for("en-GB") is None
    assert table.target_for("en-US") is None
    assert table.target_for("zh-Hant-HK") == "en"
    assert table.target_for("zh_TW") == "en"
    assert table.target_for("fr") is None
    assert table.target_for(None) is None


def test_slug_reconciler_writes_once() -> None:
    store = InMemoryRecordStore()
    guard = InMemoryOperationGuard()
    slugs = SlugReconciler(store, guard)

    async def scenario():
        record = await store.create(ARTICLE, {"locale": "en", "slug": "my-title"})
        writes = store.write_count
        first = await slugs.reconcile(record)
        second = await slugs.reconcile_by_id(record.id)
        missing = await slugs.reconcile_by_id(999)
        return first, second, missing, store.write_count - writes

    first, second, missing, writes = asyncio.run(scenario())

    assert first.details == {"slug": "1", "previous": "my-title"}
    assert second.reason == "slug_current"
    assert missing is None
    assert writes == 1
    assert guard.active_keys() == []


def test_slug_reconciler_respects_guard() -> None:
    store = InMemoryRecordStore()
    guard = InMemoryOperationGuard()
    slugs = SlugReconciler(store, guard)

    async def scenario():
        record = await store.create(ARTICLE, {"locale": "en"})
        guard.start(f"slug:{record.id}")
        return await slugs.reconcile(record)

    assert asyncio.run(scenario()).reason == "guard_active"


def test_scheduler_drains_nested_tasks_and_survives_failures() -> None:
    scheduler = ReactionScheduler()
    seen = []

    async def child():
        await asyncio.sleep(0)
        seen.append("child")

    async def parent():
        scheduler.spawn(child(), name="child")
        seen.append("parent")

    async def failing():
        raise ValueError("bad reaction")

    async def scenario():
        scheduler.spawn(parent(), name="parent")
        scheduler.spawn(failing(), name="failing")
        await scheduler.drain()
        return scheduler.pending

    assert asyncio.run(scenario()) == 0
    assert seen == ["parent", "child"]


def test_scheduler_cancel_all() -> None:
    scheduler = ReactionScheduler()

    async def forever():
        await asyncio.sleep(3600)

    async def scenario():
        task = scheduler.spawn(forever(), name="forever")
        await asyncio.sleep(0)
        await scheduler.cancel_all()
        return task.cancelled()

    assert asyncio.run(scenario()) is True
