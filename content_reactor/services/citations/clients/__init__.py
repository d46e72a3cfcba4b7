"""HTTP clients used by citation enrichment."""

from .base import BaseCitationClient
from .crossref import CrossRefClient, parse_crossref_message
from .page import PageDoiScanner, find_doi_in_html
from .zotero import ZoteroClient, parse_zotero_item

__all__ = [
    "BaseCitationClient",
    "CrossRefClient",
    "PageDoiScanner",
    "ZoteroClient",
    "find_doi_in_html",
    "parse_crossref_message",
    "parse_zotero_item",
]
