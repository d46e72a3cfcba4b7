from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from content_reactor.config_manager import ReactorSettings
from content_reactor.records import InMemoryRecordStore, LocalMediaStore
from content_reactor.services.citations import BibliographicResolver
from content_reactor.services.engine import ReactionEngine, build_engine

from tests.helpers.reaction_fakes import (
    CountingTranslator,
    FakeCrossRef,
    FakePageScanner,
    FakeRenderer,
    FakeZotero,
    journal_article,
)


@pytest.fixture
def settings(tmp_path: Path) -> ReactorSettings:
    public_dir = tmp_path / "public"
    (public_dir / "uploads").mkdir(parents=True)
    return ReactorSettings(
        public_dir=str(public_dir),
        media_dir=str(tmp_path / "media"),
        tmp_dir=str(tmp_path / "tmp"),
    )


@pytest.fixture
def translator() -> CountingTranslator:
    return CountingTranslator()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer(pages=3)


@pytest.fixture
def crossref() -> FakeCrossRef:
    return FakeCrossRef({"10.1000/xyz": journal_article("10.1000/xyz")})


@pytest.fixture
def zotero() -> FakeZotero:
    return FakeZotero()


@pytest.fixture
def page_scanner() -> FakePageScanner:
    return FakePageScanner()


@pytest.fixture
def media_store(tmp_path: Path) -> LocalMediaStore:
    return LocalMediaStore(tmp_path / "media")


@pytest.fixture
def idle_engine(
    settings: ReactorSettings,
    translator: CountingTranslator,
    renderer: FakeRenderer,
    media_store: LocalMediaStore,
    crossref: FakeCrossRef,
    zotero: FakeZotero,
    page_scanner: FakePageScanner,
) -> ReactionEngine:
    """An engine that is not subscribed to its store's mutation events."""

    return build_engine(
        settings,
        store=InMemoryRecordStore(),
        media_store=media_store,
        translator=translator,
        renderer=renderer,
        resolver=BibliographicResolver(
            crossref=crossref, zotero=zotero, page_scanner=page_scanner
        ),
    )


@pytest.fixture
def engine(idle_engine: ReactionEngine) -> Iterator[ReactionEngine]:
    idle_engine.attach()
    yield idle_engine
    idle_engine.detach()
