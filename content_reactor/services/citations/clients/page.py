"""Find a DOI by scanning the HTML of a landing page."""

from __future__ import annotations

from typing import Optional

import regex
from bs4 import BeautifulSoup

from ..doi import clean_doi
from .base import BaseCitationClient, logger

_META_NAMES = {"citation_doi", "dc.identifier", "doi"}
_META_PROPERTIES = {"og:doi", "citation_doi"}

_FALLBACK_PATTERNS = (
    regex.compile(r"""data-doi=["']([^"']+)["']""", regex.IGNORECASE),
    regex.compile(r'"doi"\s*:\s*"(10\.[^"]+)"', regex.IGNORECASE),
    regex.compile(r"""doi\.org/(10\.\d+/[^"'\s<>]+)""", regex.IGNORECASE),
)


def find_doi_in_html(markup: str) -> Optional[str]:
    soup = BeautifulSoup(markup, "html.parser")
    for meta in soup.find_all("meta"):
        content = meta.get("content")
        if not content:
            continue
        name = (meta.get("name") or "").strip().lower()
        prop = (meta.get("property") or "").strip().lower()
        if name in _META_NAMES or prop in _META_PROPERTIES:
            doi = clean_doi(content)
            if doi:
                return doi
    for pattern in _FALLBACK_PATTERNS:
        match = pattern.search(markup)
        if match:
            doi = clean_doi(match.group(1))
            if doi:
                return doi
    return None


class PageDoiScanner(BaseCitationClient):
    name = "page"

    def find_doi(self, url: str) -> Optional[str]:
        response = self._get(url, headers={"Accept": "text/html"})
        if response is None:
            return None
        doi = find_doi_in_html(response.text)
        if doi:
            logger.debug("Found DOI in page: %s", doi)
        else:
            logger.debug("No DOI found in page meta tags for %s", url)
        return doi


__all__ = ["PageDoiScanner", "find_doi_in_html"]
