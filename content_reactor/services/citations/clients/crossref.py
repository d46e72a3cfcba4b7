"""CrossRef works API client."""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

from ....config_manager.constants import CROSSREF_API_URL
from ..types import CitationMetadata, Contributor
from .base import BaseCitationClient, logger


def _first(values: Any) -> Optional[str]:
    if isinstance(values, list) and values:
        return str(values[0]) if values[0] else None
    if isinstance(values, str) and values:
        return values
    return None


def _year(message: Mapping[str, Any]) -> Optional[str]:
    for key in ("published", "published-print", "published-online"):
        parts = (message.get(key) or {}).get("date-parts")
        if parts and parts[0] and parts[0][0]:
            return str(parts[0][0])
    return None


def parse_crossref_message(message: Mapping[str, Any]) -> CitationMetadata:
    authors = [
        Contributor(
            family=author.get("family"),
            given=author.get("given"),
            name=author.get("name"),
        )
        for author in message.get("author") or []
        if isinstance(author, Mapping)
    ]
    return CitationMetadata(
        source="crossref",
        authors=authors,
        year=_year(message),
        title=_first(message.get("title")),
        container_title=_first(message.get("container-title")),
        volume=message.get("volume"),
        issue=message.get("issue"),
        pages=message.get("page"),
        doi=message.get("DOI"),
        url=message.get("URL"),
    )


class CrossRefClient(BaseCitationClient):
    """Look up work metadata by DOI."""

    name = "crossref"

    def __init__(
        self, *, api_url: str = CROSSREF_API_URL, mailto: Optional[str] = None, **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self._api_url = api_url.rstrip("/")
        self._mailto = mailto

    def _headers(self, extra: Optional[dict] = None) -> dict:
        headers = super()._headers(extra)
        if self._mailto and "User-Agent" in headers:
            headers["User-Agent"] = f"{headers['User-Agent']} (mailto:{self._mailto})"
        return headers

    def lookup(self, doi: str) -> Optional[CitationMetadata]:
        response = self._get(f"{self._api_url}/works/{quote(doi, safe='')}")
        if response is None:
            logger.info("CrossRef lookup failed for DOI %s", doi)
            return None
        try:
            message = response.json().get("message")
        except (ValueError, AttributeError):
            return None
        if not isinstance(message, Mapping):
            return None
        return parse_crossref_message(message)


__all__ = ["CrossRefClient", "parse_crossref_message"]
