from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import Any, Dict

import fitz
import pytest
import requests
from PIL import Image

from content_reactor.config_manager import ReactorSettings
from content_reactor.records import LocalMediaStore
from content_reactor.records.types import ContentType, FileDescriptor
from content_reactor.services.covers import (
    acquire_file_bytes,
    cover_base_name,
    resolve_local_path,
)
from content_reactor.services.covers.render import PyMuPdfRenderer
from content_reactor.services.engine import ReactionEngine
from content_reactor.services.errors import DataInconsistencyError, ExternalServiceError
from content_reactor.services.outcome import OutcomeStatus

from tests.helpers.reaction_fakes import (
    FAKE_PDF,
    FAKE_PNG,
    FakeRenderer,
    FakeResponse,
    FakeSession,
)

pytestmark = pytest.mark.covers

REPORT = ContentType.REPORT


def _write_pdf(settings: ReactorSettings, name: str = "annual-report.pdf") -> str:
    path = Path(settings.public_dir) / "uploads" / name
    path.write_bytes(FAKE_PDF)
    return f"/uploads/{name}"


def _report(url: str, *, mime: str = "application/pdf", **extra: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "locale": "en",
        "title": "Annual report",
        "report_file": {"id": 5, "name": "annual-report.pdf", "mime": mime, "url": url},
    }
    data.update(extra)
    return data


def test_cover_base_name_strips_pdf_extension() -> None:
    assert cover_base_name("Annual Report.PDF") == "Annual Report"
    assert cover_base_name("folder/brief.pdf") == "brief"
    assert cover_base_name("notes.txt") == "notes.txt"


def test_created_report_gets_cover_once(
    engine: ReactionEngine,
    settings: ReactorSettings,
    media_store: LocalMediaStore,
    renderer: FakeRenderer,
) -> None:
    url = _write_pdf(settings)

    async def scenario():
        report = await engine.store.create(REPORT, _report(url))
        await engine.drain()
        await engine.store.update(REPORT, report.id, {"title": "Annual report 2024"})
        await engine.drain()
        return await engine.store.find_one(REPORT, {"id": report.id})

    stored = asyncio.run(scenario())

    assert len(media_store.uploads) == 1
    asset = media_store.uploads[0]
    assert stored.cover == asset
    assert asset.name == "annual-report_cover.png"
    assert asset.alternative_text == "Cover page of annual-report"
    assert (media_store.media_dir / Path(asset.url).name).read_bytes() == FAKE_PNG
    assert renderer.documents[0].rendered == [(0, settings.cover_render_scale)]
    assert renderer.documents[0].closed
    assert list(Path(settings.tmp_dir).glob("*.png")) == []
    assert engine.guard.active_keys() == []


def test_lifecycle_keeps_existing_cover_but_explicit_trigger_replaces_it(
    engine: ReactionEngine,
    settings: ReactorSettings,
    media_store: LocalMediaStore,
) -> None:
    url = _write_pdf(settings)
    existing = {"id": 99, "name": "manual.png", "url": "/uploads/manual.png"}

    async def scenario():
        report = await engine.store.create(REPORT, _report(url, cover=existing))
        await engine.drain()
        uploads_after_lifecycle = len(media_store.uploads)
        outcome = await engine.dispatcher.trigger_cover_extraction_for_document(
            report.document_id
        )
        await engine.drain()
        stored = await engine.store.find_one(REPORT, {"id": report.id})
        return uploads_after_lifecycle, outcome, stored

    uploads_after_lifecycle, outcome, stored = asyncio.run(scenario())

    assert uploads_after_lifecycle == 0
    assert outcome.status == OutcomeStatus.SUCCEEDED
    assert outcome.details["replaced"] is True
    assert len(media_store.uploads) == 1
    assert stored.cover.id == outcome.details["cover_id"] != 99


def test_zero_page_pdf_fails_without_upload(
    idle_engine: ReactionEngine,
    settings: ReactorSettings,
    media_store: LocalMediaStore,
    renderer: FakeRenderer,
) -> None:
    renderer.pages = 0
    url = _write_pdf(settings)

    async def scenario():
        report = await idle_engine.store.create(REPORT, _report(url))
        return report, await idle_engine.dispatcher.trigger_cover_extraction(report.id)

    report, outcome = asyncio.run(scenario())

    assert outcome.status == OutcomeStatus.FAILED
    assert outcome.reason == "data_inconsistency"
    assert outcome.message == "PDF has no pages"
    assert media_store.uploads == []
    assert not idle_engine.guard.is_active(f"cover:{report.id}")


def test_non_pdf_file_is_skipped_or_rejected(
    idle_engine: ReactionEngine, media_store: LocalMediaStore
) -> None:
    async def scenario():
        report = await idle_engine.store.create(
            REPORT, _report("/uploads/photo.png", mime="image/png")
        )
        automatic = await idle_engine.covers.run(report.id, explicit=False)
        explicit = await idle_engine.covers.run(report.id, explicit=True)
        return automatic, explicit

    automatic, explicit = asyncio.run(scenario())

    assert automatic.status == OutcomeStatus.SKIPPED
    assert automatic.reason == "not_pdf"
    assert explicit.status == OutcomeStatus.FAILED
    assert explicit.reason == "unsupported_input"
    assert media_store.uploads == []


def test_report_without_file_and_missing_report(idle_engine: ReactionEngine) -> None:
    async def scenario():
        report = await idle_engine.store.create(REPORT, {"locale": "en", "title": "Empty"})
        return (
            await idle_engine.covers.run(report.id),
            await idle_engine.covers.run(report.id, explicit=True),
            await idle_engine.dispatcher.trigger_cover_extraction_for_document("missing"),
        )

    automatic, explicit, missing = asyncio.run(scenario())

    assert automatic.reason == "no_file"
    assert explicit.reason == "unsupported_input"
    assert missing.reason == "record_not_found"


def test_cover_guard_blocks_concurrent_extraction(
    idle_engine: ReactionEngine, settings: ReactorSettings, media_store: LocalMediaStore
) -> None:
    url = _write_pdf(settings)

    async def scenario():
        report = await idle_engine.store.create(REPORT, _report(url))
        idle_engine.guard.start(f"cover:{report.id}")
        return await idle_engine.covers.run(report.id, explicit=True)

    outcome = asyncio.run(scenario())

    assert outcome.status == OutcomeStatus.SKIPPED
    assert outcome.reason == "guard_active"
    assert media_store.uploads == []


def test_missing_local_file_is_data_inconsistency(tmp_path: Path) -> None:
    descriptor = FileDescriptor(name="gone.pdf", mime="application/pdf", url="/uploads/gone.pdf")

    with pytest.raises(DataInconsistencyError, match="File not found"):
        acquire_file_bytes(descriptor, public_dir=tmp_path)


def test_local_path_may_not_escape_public_dir(tmp_path: Path) -> None:
    assert resolve_local_path("/uploads/a.pdf", tmp_path) == (tmp_path / "uploads" / "a.pdf").resolve()
    with pytest.raises(DataInconsistencyError):
        resolve_local_path("/../secret.pdf", tmp_path)


def test_remote_file_download_caps_redirects(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse(200, content=FAKE_PDF))
    descriptor = FileDescriptor(
        name="r.pdf", mime="application/pdf", url="https://cdn.example.org/r.pdf"
    )

    data = acquire_file_bytes(
        descriptor, public_dir=tmp_path, session=session, timeout=5, max_redirects=5
    )

    assert data == FAKE_PDF
    assert session.max_redirects == 5
    assert session.requests[0]["url"] == "https://cdn.example.org/r.pdf"
    assert session.requests[0]["timeout"] == 5


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(404),
        requests.TooManyRedirects("Exceeded 5 redirects."),
        requests.ConnectionError("refused"),
    ],
)
def test_remote_download_failures_are_external(tmp_path: Path, response: object) -> None:
    descriptor = FileDescriptor(
        name="r.pdf", mime="application/pdf", url="http://cdn.example.org/r.pdf"
    )

    with pytest.raises(ExternalServiceError):
        acquire_file_bytes(descriptor, public_dir=tmp_path, session=FakeSession(response))


def test_pymupdf_renderer_rasterises_real_pdf() -> None:
    source = fitz.open()
    source.new_page(width=100, height=200)
    data = source.tobytes()
    source.close()

    with PyMuPdfRenderer().open_document(data) as document:
        assert document.page_count() == 1
        image = document.render_page(0, 2.0)
        png = image.encode_png()

    assert image.size == (200, 400)
    assert png.startswith(b"\x89PNG\r\n\x1a\n")
    assert Image.open(io.BytesIO(png)).size == (200, 400)


def test_pymupdf_renderer_rejects_malformed_bytes() -> None:
    with pytest.raises(ValueError):
        PyMuPdfRenderer().open_document(b"not a pdf")
