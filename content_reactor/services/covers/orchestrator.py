"""Extract the first page of a report's PDF as its cover image."""

from __future__ import annotations

import time
from pathlib import Path, PurePosixPath
from typing import Optional

import requests
from fastapi.concurrency import run_in_threadpool

from ... import logging_manager as log_mgr
from ...observability import reaction_operation
from ...records.media import MediaStore, UploadMetadata
from ...records.store import RecordStore
from ...records.types import AssetRef, ContentType, FileDescriptor
from ..errors import (
    DataInconsistencyError,
    ReactionError,
    RecordNotFoundError,
    UnsupportedInputError,
)
from ..guard import OperationGuard, cover_key
from ..outcome import ReactionOutcome
from .acquire import acquire_file_bytes
from .render import PdfRenderer

logger = log_mgr.get_logger().getChild("services.covers")

PDF_MIME = "application/pdf"


def cover_base_name(file_name: str) -> str:
    """Strip a trailing ``.pdf`` from an uploaded file name."""

    name = PurePosixPath(file_name).name
    if name.lower().endswith(".pdf"):
        return name[: -len(".pdf")]
    return name


class CoverOrchestrator:
    def __init__(
        self,
        store: RecordStore,
        media_store: MediaStore,
        renderer: PdfRenderer,
        guard: OperationGuard,
        *,
        public_dir: Path,
        tmp_dir: Path,
        session: Optional[requests.Session] = None,
        timeout: float = 20.0,
        max_redirects: int = 5,
        scale: float = 2.0,
        ttl_seconds: float = 120.0,
        content_type: ContentType = ContentType.REPORT,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Record store holding the report records.
            media_store: Destination of the rendered cover image.
            renderer: PDF rasteriser used for page one.
            guard: Guard holding ``cover:<id>`` for the duration of a run.
            public_dir: Root that relative file URLs are resolved against.
            tmp_dir: Scratch directory for the PNG before upload.
            session: Optional HTTP session for remote PDFs.
            timeout: Download timeout in seconds.
            max_redirects: Redirect cap for remote downloads.
            scale: Render scale applied to the first page.
            ttl_seconds: Lifetime of the guard entry.
            content_type: Content type whose records carry the cover.
        """
        self._store = store
        self._media_store = media_store
        self._renderer = renderer
        self._guard = guard
        self._public_dir = Path(public_dir)
        self._tmp_dir = Path(tmp_dir)
        self._session = session
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._scale = scale
        self._ttl = ttl_seconds
        self._content_type = content_type

    async def run(self, record_id: int, *, explicit: bool = False) -> ReactionOutcome:
        """Render page one of the record's PDF and attach it as the cover.

        Automatic runs leave an existing cover alone; explicit runs replace it.
        """

        key = cover_key(record_id)
        if not self._guard.try_start(key, ttl_seconds=self._ttl):
            logger.info(
                "Cover extraction already in progress for record %s",
                record_id,
                extra={"event": "covers.skip.guard", "guard_key": key},
            )
            return ReactionOutcome.skipped("guard_active", guard_key=key)

        try:
            with log_mgr.log_context(record_id=record_id, guard_key=key), reaction_operation(
                "cover_extraction", attributes={"record_id": record_id, "explicit": explicit}
            ):
                return await self._extract(record_id, explicit=explicit)
        except ReactionError as exc:
            logger.error(
                "Cover extraction failed: %s",
                exc,
                extra={"event": "covers.failed", "guard_key": key, "record_id": record_id},
            )
            return ReactionOutcome.from_error(exc, record_id=record_id)
        except Exception as exc:
            logger.exception(
                "Unexpected cover extraction failure",
                extra={"event": "covers.error", "guard_key": key, "record_id": record_id},
            )
            return ReactionOutcome.failed("unexpected_error", str(exc), record_id=record_id)
        finally:
            self._guard.end(key)

    async def _extract(self, record_id: int, *, explicit: bool) -> ReactionOutcome:
        record = await self._store.find_one(self._content_type, {"id": record_id})
        if record is None:
            raise RecordNotFoundError(f"Report {record_id} not found")
        descriptor = record.report_file
        if descriptor is None:
            if explicit:
                raise UnsupportedInputError("Report has no PDF file attached")
            return ReactionOutcome.skipped("no_file")
        if record.cover is not None:
            if not explicit:
                return ReactionOutcome.skipped("cover_exists", cover_id=record.cover.id)
            logger.info(
                "Report already has cover %s; replacing it",
                record.cover.id,
                extra={"event": "covers.replace"},
            )
        if descriptor.mime != PDF_MIME:
            logger.info(
                "File is not a PDF (%s); skipping cover extraction",
                descriptor.mime,
                extra={"event": "covers.skip.mime"},
            )
            if explicit:
                raise UnsupportedInputError(f"Report file is not a PDF ({descriptor.mime})")
            return ReactionOutcome.skipped("not_pdf", mime=descriptor.mime)

        pdf_bytes = await run_in_threadpool(
            acquire_file_bytes,
            descriptor,
            public_dir=self._public_dir,
            session=self._session,
            timeout=self._timeout,
            max_redirects=self._max_redirects,
        )
        png_bytes = await run_in_threadpool(self._render_first_page, pdf_bytes)
        asset = await self._upload(descriptor, png_bytes)
        await self._store.update(self._content_type, record.id, {"cover": asset})
        logger.info(
            "Cover set for report %s",
            record.id,
            extra={"event": "covers.complete", "asset_id": asset.id},
        )
        return ReactionOutcome.succeeded(
            "Cover extracted",
            record_id=record.id,
            cover_id=asset.id,
            cover_url=asset.url,
            replaced=record.cover is not None,
        )

    def _render_first_page(self, pdf_bytes: bytes) -> bytes:
        try:
            document = self._renderer.open_document(pdf_bytes)
        except ValueError as exc:
            raise UnsupportedInputError(str(exc)) from exc
        with document:
            pages = document.page_count()
            logger.debug("PDF loaded, pages: %s", pages, extra={"event": "covers.pdf.loaded"})
            if pages < 1:
                raise DataInconsistencyError("PDF has no pages")
            image = document.render_page(0, self._scale)
            return image.encode_png()

    def _write_temp(self, path: Path, data: bytes) -> None:
        self._tmp_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def _upload(self, descriptor: FileDescriptor, png_bytes: bytes) -> AssetRef:
        base_name = cover_base_name(descriptor.name)
        output_path = self._tmp_dir / f"{base_name}_cover_{int(time.time() * 1000)}.png"
        await run_in_threadpool(self._write_temp, output_path, png_bytes)
        try:
            return await self._media_store.upload(
                output_path,
                UploadMetadata(
                    name=f"{base_name}_cover.png",
                    caption=f"Cover page of {descriptor.name}",
                    alternative_text=f"Cover page of {base_name}",
                ),
            )
        finally:
            output_path.unlink(missing_ok=True)


__all__ = ["CoverOrchestrator", "PDF_MIME", "cover_base_name"]
