"""Normalised bibliographic metadata shared by citation clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class Contributor:
    family: Optional[str] = None
    given: Optional[str] = None
    # Institutional or single-field names.
    name: Optional[str] = None


@dataclass(slots=True)
class CitationMetadata:
    """Work metadata from CrossRef or the Zotero translation server."""

    source: str
    authors: List[Contributor] = field(default_factory=list)
    year: Optional[str] = None
    title: Optional[str] = None
    container_title: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    site_name: Optional[str] = None


__all__ = ["CitationMetadata", "Contributor"]
