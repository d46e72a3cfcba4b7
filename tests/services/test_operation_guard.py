from __future__ import annotations

import pytest

from content_reactor.records.types import BlockKind, ContentBlock, RecordVariant, ReferenceEntry
from content_reactor.services.guard import (
    ContentFingerprints,
    GuardBusyError,
    InMemoryOperationGuard,
    citations_key,
    cover_key,
    fingerprint_key,
    fingerprint_record,
    slug_key,
    translation_key,
)

pytestmark = pytest.mark.guard


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_guard_keys_follow_operation_naming() -> None:
    assert translation_key("doc1", "en", "zh-Hant-HK") == "translate:doc1:en->zh-Hant-HK"
    assert cover_key(7) == "cover:7"
    assert slug_key(7) == "slug:7"
    assert citations_key("doc1") == "citations:doc1"


def test_try_start_refuses_active_key_until_ended() -> None:
    guard = InMemoryOperationGuard(60)

    assert guard.try_start("cover:1") is True
    assert guard.try_start("cover:1") is False
    assert guard.is_active("cover:1") is True

    guard.end("cover:1")

    assert guard.is_active("cover:1") is False
    assert guard.try_start("cover:1") is True


def test_entries_expire_after_their_own_ttl() -> None:
    clock = _Clock()
    guard = InMemoryOperationGuard(60, clock=clock)
    guard.start("translate:doc:en->zh")
    guard.start("cover:3", ttl_seconds=120)

    clock.now += 59.9
    assert guard.is_active("translate:doc:en->zh")

    clock.now += 0.1
    assert not guard.is_active("translate:doc:en->zh")
    assert guard.is_active("cover:3")
    assert guard.active_keys() == ["cover:3"]

    clock.now += 60
    assert guard.try_start("cover:3", ttl_seconds=120)


def test_start_refreshes_timestamp() -> None:
    clock = _Clock()
    guard = InMemoryOperationGuard(10, clock=clock)
    guard.start("slug:1")
    clock.now += 8
    guard.start("slug:1")
    clock.now += 8

    assert guard.is_active("slug:1")


def test_ending_unknown_key_is_a_no_op() -> None:
    guard = InMemoryOperationGuard()
    guard.end("never-started")
    assert guard.active_keys() == []


def test_held_releases_on_error_and_rejects_busy_key() -> None:
    guard = InMemoryOperationGuard()

    with pytest.raises(RuntimeError):
        with guard.held("citations:doc"):
            with pytest.raises(GuardBusyError):
                with guard.held("citations:doc"):
                    pass
            raise RuntimeError("boom")

    assert not guard.is_active("citations:doc")


def test_fingerprint_ignores_ids_slugs_and_references() -> None:
    base = RecordVariant(
        id=1,
        document_id="doc",
        locale="en",
        title="Hello",
        blocks=[
            ContentBlock(kind=BlockKind.RICH_TEXT, id=4, body="Body"),
            ContentBlock(
                kind=BlockKind.REFERENCE,
                id=5,
                references=[ReferenceEntry(link="https://example.org")],
            ),
        ],
    )
    echoed = RecordVariant(
        id=1,
        document_id="doc",
        locale="en",
        slug="1",
        title="Hello",
        blocks=[
            ContentBlock(kind=BlockKind.RICH_TEXT, id=9, body="Body"),
            ContentBlock(
                kind=BlockKind.REFERENCE,
                references=[ReferenceEntry(link="https://example.org", citation="<p>x</p>")],
            ),
        ],
    )
    edited = RecordVariant(id=1, document_id="doc", locale="en", title="Hello!")

    assert fingerprint_record(base) == fingerprint_record(echoed)
    assert fingerprint_record(base) != fingerprint_record(edited)


def test_fingerprints_match_until_expiry_and_forget() -> None:
    clock = _Clock()
    fingerprints = ContentFingerprints(100, clock=clock)
    key = fingerprint_key("doc", "zh_Hant_HK")

    assert key == "doc:zh-hant-hk"
    fingerprints.remember(key, "abc")

    assert fingerprints.matches(key, "abc")
    assert not fingerprints.matches(key, "def")

    clock.now += 100
    assert not fingerprints.matches(key, "abc")

    fingerprints.remember(key, "abc")
    fingerprints.forget(key)
    assert not fingerprints.matches(key, "abc")
