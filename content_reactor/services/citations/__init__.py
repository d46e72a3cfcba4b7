"""APA citation enrichment for reference-list blocks."""

from .clients import CrossRefClient, PageDoiScanner, ZoteroClient
from .doi import clean_doi, extract_doi
from .formatting import format_apa, is_placeholder, placeholder_citation
from .orchestrator import CitationOrchestrator, needs_citation
from .resolver import BibliographicResolver
from .types import CitationMetadata, Contributor

__all__ = [
    "BibliographicResolver",
    "CitationMetadata",
    "CitationOrchestrator",
    "Contributor",
    "CrossRefClient",
    "PageDoiScanner",
    "ZoteroClient",
    "clean_doi",
    "extract_doi",
    "format_apa",
    "is_placeholder",
    "needs_citation",
    "placeholder_citation",
]
