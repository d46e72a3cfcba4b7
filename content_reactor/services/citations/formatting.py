"""APA 7th edition citation rendering as HTML fragments."""

from __future__ import annotations

import html
from typing import List, Optional

import regex

from .types import CitationMetadata, Contributor

_NAME_SPLIT = regex.compile(r"[\s-]+")
PLACEHOLDER_MARKER = "Retrieved from"


def _escape(value: object) -> str:
    return html.escape(str(value), quote=True).replace("&#x27;", "&#039;")


def initials(given: str) -> str:
    """``"Jane-Marie Ann"`` -> ``"J. M. A."``"""

    return " ".join(f"{part[0].upper()}." for part in _NAME_SPLIT.split(given) if part)


def format_contributor(person: Contributor) -> str:
    if person.name:
        return _escape(person.name)
    if person.family and person.given:
        return f"{_escape(person.family)}, {initials(person.given)}"
    return _escape(person.family or person.given or "")


def format_author_list(authors: List[Contributor]) -> Optional[str]:
    names = [name for name in (format_contributor(a) for a in authors) if name]
    if not names:
        return None
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} &amp; {names[1]}"
    if len(names) <= 20:
        return f"{', '.join(names[:-1])}, &amp; {names[-1]}"
    return f"{', '.join(names[:19])}, ... {names[-1]}"


def _link(url: str) -> str:
    escaped = _escape(url)
    return f'<a href="{escaped}" target="_blank">{escaped}</a>'


def format_apa(metadata: CitationMetadata, original_url: Optional[str] = None) -> str:
    """Render ``metadata`` as an APA reference wrapped in ``<p>``."""

    parts: List[str] = []
    authors = format_author_list(metadata.authors)
    if authors:
        parts.append(authors)

    parts.append(f"({_escape(metadata.year) if metadata.year else 'n.d.'}).")

    if metadata.title:
        parts.append(f"{_escape(metadata.title)}.")

    if metadata.container_title:
        journal = f"<em>{_escape(metadata.container_title)}</em>"
        if metadata.volume:
            journal += f", <em>{_escape(metadata.volume)}</em>"
        if metadata.issue:
            journal += f"({_escape(metadata.issue)})"
        if metadata.pages:
            journal += f", {_escape(metadata.pages)}"
        parts.append(journal + ".")
    elif metadata.site_name:
        parts.append(f"<em>{_escape(metadata.site_name)}</em>.")

    if metadata.doi:
        parts.append(_link(f"https://doi.org/{metadata.doi}"))
    elif metadata.url:
        parts.append(_link(metadata.url))
    elif original_url:
        parts.append(_link(original_url))

    return f"<p>{' '.join(parts)}</p>"


def placeholder_citation(url: str) -> str:
    return f"<p>{PLACEHOLDER_MARKER} {_link(url)}</p>"


def is_placeholder(citation: Optional[str]) -> bool:
    return bool(citation) and PLACEHOLDER_MARKER in citation


__all__ = [
    "PLACEHOLDER_MARKER",
    "format_apa",
    "format_author_list",
    "format_contributor",
    "initials",
    "is_placeholder",
    "placeholder_citation",
]
