"""Zotero translation server client."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import regex

from ....config_manager.constants import DEFAULT_ZOTERO_SERVER
from ..types import CitationMetadata, Contributor
from .base import BaseCitationClient, logger

_YEAR = regex.compile(r"\d{4}")


def parse_zotero_item(item: Mapping[str, Any]) -> CitationMetadata:
    authors = [
        Contributor(
            family=creator.get("lastName"),
            given=creator.get("firstName"),
            name=creator.get("name"),
        )
        for creator in item.get("creators") or []
        if isinstance(creator, Mapping) and creator.get("creatorType") == "author"
    ]
    date = item.get("date")
    year: Optional[str] = None
    if isinstance(date, str) and date:
        match = _YEAR.search(date)
        year = match.group(0) if match else date
    return CitationMetadata(
        source="zotero",
        authors=authors,
        year=year,
        title=item.get("title"),
        container_title=item.get("publicationTitle"),
        volume=item.get("volume"),
        issue=item.get("issue"),
        pages=item.get("pages"),
        doi=item.get("DOI"),
        url=item.get("url"),
        site_name=item.get("websiteTitle") or item.get("siteName"),
    )


class ZoteroClient(BaseCitationClient):
    """Resolve arbitrary web pages through a Zotero translation server."""

    name = "zotero"

    def __init__(self, *, server_url: str = DEFAULT_ZOTERO_SERVER, **kwargs) -> None:
        super().__init__(**kwargs)
        self._server_url = server_url.rstrip("/")

    def lookup(self, url: str) -> Optional[CitationMetadata]:
        items = self._post_json(
            f"{self._server_url}/web",
            data=url.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        if not isinstance(items, list) or not items or not isinstance(items[0], Mapping):
            logger.info("No Zotero metadata found for %s", url)
            return None
        return parse_zotero_item(items[0])


__all__ = ["ZoteroClient", "parse_zotero_item"]
