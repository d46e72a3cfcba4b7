"""Combine DOI discovery and metadata lookups into one citation source."""

from __future__ import annotations

from typing import Optional

from ... import logging_manager as log_mgr
from .clients import CrossRefClient, PageDoiScanner, ZoteroClient
from .doi import extract_doi
from .formatting import format_apa
from .types import CitationMetadata

logger = log_mgr.get_logger().getChild("services.citations.resolver")


class BibliographicResolver:
    """Resolve a reference URL to APA HTML.

    Lookup order: DOI in the URL, DOI on the landing page, CrossRef by DOI,
    then the Zotero translation server by URL. Every step swallows its own
    failures and hands over to the next one.
    """

    def __init__(
        self,
        *,
        crossref: CrossRefClient,
        zotero: ZoteroClient,
        page_scanner: PageDoiScanner,
    ) -> None:
        self._crossref = crossref
        self._zotero = zotero
        self._page_scanner = page_scanner

    def resolve_by_doi(self, doi: str) -> Optional[CitationMetadata]:
        return self._crossref.lookup(doi)

    def resolve_by_url(self, url: str) -> Optional[CitationMetadata]:
        return self._zotero.lookup(url)

    def find_doi(self, url: str) -> Optional[str]:
        doi = extract_doi(url)
        if doi:
            return doi
        logger.debug("No DOI in URL, fetching page to find one: %s", url)
        return self._page_scanner.find_doi(url)

    def cite(self, url: str) -> Optional[str]:
        """Return APA HTML for ``url`` or ``None`` when every source failed."""

        doi = self.find_doi(url)
        if doi:
            metadata = self.resolve_by_doi(doi)
            if metadata is not None:
                return format_apa(metadata, url)
            logger.info("CrossRef failed for DOI %s; trying Zotero", doi)
        metadata = self.resolve_by_url(url)
        if metadata is not None:
            return format_apa(metadata, url)
        logger.info("All citation sources failed for %s", url)
        return None

    def close(self) -> None:
        self._crossref.close()
        self._zotero.close()
        self._page_scanner.close()


__all__ = ["BibliographicResolver"]
