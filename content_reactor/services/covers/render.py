"""PDF rasterisation contract and its PyMuPDF implementation."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod

import fitz
from PIL import Image


class RasterImage(ABC):
    @property
    @abstractmethod
    def size(self) -> tuple[int, int]:
        """Pixel width and height."""

    @abstractmethod
    def encode_png(self) -> bytes:
        """Return the image encoded as PNG."""


class PdfDocument(ABC):
    @abstractmethod
    def page_count(self) -> int:
        ...

    @abstractmethod
    def render_page(self, index: int, scale: float) -> RasterImage:
        """Render page ``index`` at ``scale`` times its natural size."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class PdfRenderer(ABC):
    @abstractmethod
    def open_document(self, data: bytes) -> PdfDocument:
        """Open a PDF from raw bytes; malformed input raises ``ValueError``."""


class PillowRasterImage(RasterImage):
    def __init__(self, image: Image.Image) -> None:
        self._image = image

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def encode_png(self) -> bytes:
        buffer = io.BytesIO()
        self._image.save(buffer, format="PNG")
        return buffer.getvalue()


class PyMuPdfDocument(PdfDocument):
    def __init__(self, document: fitz.Document) -> None:
        self._document = document

    def page_count(self) -> int:
        return self._document.page_count

    def render_page(self, index: int, scale: float) -> RasterImage:
        page = self._document.load_page(index)
        matrix = fitz.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=matrix, alpha=False)
        image = Image.frombytes("RGB", [pix.width, pix.height], pix.samples)
        return PillowRasterImage(image)

    def close(self) -> None:
        self._document.close()


class PyMuPdfRenderer(PdfRenderer):
    """Rasterise PDF pages with PyMuPDF and encode them with Pillow."""

    def open_document(self, data: bytes) -> PdfDocument:
        try:
            document = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise ValueError(f"Unable to open PDF: {exc}") from exc
        return PyMuPdfDocument(document)


__all__ = [
    "PdfDocument",
    "PdfRenderer",
    "PillowRasterImage",
    "PyMuPdfDocument",
    "PyMuPdfRenderer",
    "RasterImage",
]
