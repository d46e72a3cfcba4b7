"""In-process stand-ins for the external collaborators of the reaction engine."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

from content_reactor.services.citations.clients import (
    CrossRefClient,
    PageDoiScanner,
    ZoteroClient,
)
from content_reactor.services.citations.types import CitationMetadata, Contributor
from content_reactor.services.covers.render import PdfDocument, PdfRenderer, RasterImage
from content_reactor.services.errors import ExternalServiceError
from content_reactor.services.translation_providers import Translator

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-cover"
FAKE_PDF = b"%PDF-1.4\n% fake report\n"


class CountingTranslator(Translator):
    """Prefix text with the provider target code and record every call."""

    name = "counting"
    requires_api_key = False

    def __init__(self) -> None:
        super().__init__()
        self.calls: List[Tuple[str, str, str]] = []
        self.fail = False
        self._lock = threading.Lock()

    def _translate(self, text: str, source_code: str, target_code: str) -> str:
        with self._lock:
            self.calls.append((text, source_code, target_code))
        if self.fail:
            raise ExternalServiceError("Translation failed: provider offline", service=self.name)
        return f"[{target_code}] {text}"

    def texts(self) -> List[str]:
        return [text for text, _, _ in self.calls]


class FakeImage(RasterImage):
    @property
    def size(self) -> tuple[int, int]:
        return (120, 160)

    def encode_png(self) -> bytes:
        return FAKE_PNG


class FakeDocument(PdfDocument):
    def __init__(self, pages: int) -> None:
        self._pages = pages
        self.rendered: List[Tuple[int, float]] = []
        self.closed = False

    def page_count(self) -> int:
        return self._pages

    def render_page(self, index: int, scale: float) -> RasterImage:
        self.rendered.append((index, scale))
        return FakeImage()

    def close(self) -> None:
        self.closed = True


class FakeRenderer(PdfRenderer):
    """Accept anything starting with ``%PDF`` and report ``pages`` pages."""

    def __init__(self, pages: int = 1) -> None:
        self.pages = pages
        self.documents: List[FakeDocument] = []

    def open_document(self, data: bytes) -> PdfDocument:
        if not data.startswith(b"%PDF"):
            raise ValueError("Unable to open PDF: not a PDF stream")
        document = FakeDocument(self.pages)
        self.documents.append(document)
        return document


class FakeCrossRef(CrossRefClient):
    def __init__(self, records: Optional[Dict[str, CitationMetadata]] = None) -> None:
        super().__init__()
        self.records = dict(records or {})
        self.calls: List[str] = []

    def lookup(self, doi: str) -> Optional[CitationMetadata]:
        self.calls.append(doi)
        return self.records.get(doi)


class FakeZotero(ZoteroClient):
    def __init__(self, records: Optional[Dict[str, CitationMetadata]] = None) -> None:
        super().__init__()
        self.records = dict(records or {})
        self.calls: List[str] = []

    def lookup(self, url: str) -> Optional[CitationMetadata]:
        self.calls.append(url)
        return self.records.get(url)


class FakePageScanner(PageDoiScanner):
    def __init__(self, dois: Optional[Dict[str, str]] = None) -> None:
        super().__init__()
        self.dois = dict(dois or {})
        self.calls: List[str] = []

    def find_doi(self, url: str) -> Optional[str]:
        self.calls.append(url)
        return self.dois.get(url)


def journal_article(doi: str = "10.1000/xyz") -> CitationMetadata:
    return CitationMetadata(
        source="crossref",
        authors=[
            Contributor(family="Smith", given="Jane Ann"),
            Contributor(family="Doe", given="John"),
        ],
        year="2020",
        title="A study of things",
        container_title="Journal of Studies",
        volume="12",
        issue="3",
        pages="45-67",
        doi=doi,
    )


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        *,
        payload: object = None,
        content: bytes = b"",
        text: str = "",
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = text

    def json(self) -> object:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """Minimal ``requests.Session`` replacement returning queued responses."""

    def __init__(self, *responses: object) -> None:
        self._responses = list(responses)
        self.requests: List[Dict[str, object]] = []
        self.max_redirects = 30
        self.closed = False

    def _next(self, method: str, url: str, **kwargs: object) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response  # type: ignore[return-value]

    def request(self, method: str, url: str, **kwargs: object) -> FakeResponse:
        return self._next(method.upper(), url, **kwargs)

    def get(self, url: str, **kwargs: object) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: object) -> FakeResponse:
        return self._next("POST", url, **kwargs)

    def close(self) -> None:
        self.closed = True
