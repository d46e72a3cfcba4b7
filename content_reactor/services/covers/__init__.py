"""Cover image extraction from uploaded PDF reports."""

from .acquire import acquire_file_bytes, resolve_local_path
from .orchestrator import PDF_MIME, CoverOrchestrator, cover_base_name
from .render import PdfDocument, PdfRenderer, PyMuPdfRenderer, RasterImage

__all__ = [
    "CoverOrchestrator",
    "PDF_MIME",
    "PdfDocument",
    "PdfRenderer",
    "PyMuPdfRenderer",
    "RasterImage",
    "acquire_file_bytes",
    "cover_base_name",
    "resolve_local_path",
]
