"""DOI extraction from publisher URLs."""

from __future__ import annotations

from typing import Optional

import regex

from ... import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("services.citations.doi")

_DIRECT_PATTERNS = (
    regex.compile(r"doi\.org/(.+?)(?:\?|$)", regex.IGNORECASE),
    regex.compile(r"doi\.org/(.+)", regex.IGNORECASE),
    regex.compile(r"/doi/(?:abs/|full/)?(.+?)(?:\?|$)", regex.IGNORECASE),
    regex.compile(r"/(10\.\d{4,}/[^\s/?#]+)", regex.IGNORECASE),
)

# (pattern, prefix) pairs for publishers whose URLs carry the DOI suffix only.
_PUBLISHER_PATTERNS = (
    (regex.compile(r"nature\.com/articles/(s\d+[^/?\s]+)", regex.IGNORECASE), "10.1038/"),
    (regex.compile(r"pnas\.org/content/(\d+/\d+/[^/?\s]+)", regex.IGNORECASE), "10.1073/pnas."),
    (regex.compile(r"cell\.com/[^/]+/fulltext/(S[\d\-X()]+)", regex.IGNORECASE), "10.1016/j.cell."),
    (regex.compile(r"springer\.com/article/(10\.\d+/[^/?\s]+)", regex.IGNORECASE), ""),
    (regex.compile(r"wiley\.com/doi/(?:abs/|full/)?(10\.\d+/[^/?\s]+)", regex.IGNORECASE), ""),
    (regex.compile(r"tandfonline\.com/doi/(?:abs/|full/)?(10\.\d+/[^/?\s]+)", regex.IGNORECASE), ""),
    (regex.compile(r"sagepub\.com/doi/(?:abs/|full/)?(10\.\d+/[^/?\s]+)", regex.IGNORECASE), ""),
    (regex.compile(r"academic\.oup\.com/[^/]+/article/(\d+/\d+/\d+)", regex.IGNORECASE), "10.1093/"),
    (
        regex.compile(r"sciencedirect\.com/science/article/(?:abs/)?pii/(S\d+)", regex.IGNORECASE),
        "10.1016/",
    ),
)

_DOI_PREFIXES = (
    regex.compile(r"^https?://(?:dx\.)?doi\.org/", regex.IGNORECASE),
    regex.compile(r"^doi:\s*", regex.IGNORECASE),
)


def clean_doi(value: str) -> str:
    """Strip resolver URL and ``doi:`` prefixes plus surrounding whitespace."""

    doi = value.strip()
    for pattern in _DOI_PREFIXES:
        doi = pattern.sub("", doi)
    return doi.strip()


def extract_doi(url: Optional[str]) -> Optional[str]:
    """Return the DOI embedded in ``url`` without fetching anything."""

    if not url:
        return None
    for pattern in _DIRECT_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1).rstrip("/")
    for pattern, prefix in _PUBLISHER_PATTERNS:
        match = pattern.search(url)
        if match:
            doi = prefix + match.group(1)
            logger.debug("Extracted DOI from publisher URL: %s", doi)
            return doi
    return None


__all__ = ["clean_doi", "extract_doi"]
