"""Core type definitions for content records and mutation events."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class ContentType(str, Enum):
    """Record collections the engine reacts to."""

    ARTICLE = "article"
    REPORT = "report"


class MutationAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class BlockKind(str, Enum):
    """Tags of the dynamic content blocks carried by articles."""

    RICH_TEXT = "shared.rich-text"
    QUOTE = "shared.quote"
    MEDIA = "shared.media"
    SLIDER = "shared.slider"
    REFERENCE = "shared.reference"


# Only these block kinds carry free text that is sent to the translator.
TRANSLATABLE_BLOCK_FIELDS: Dict[BlockKind, tuple[str, ...]] = {
    BlockKind.RICH_TEXT: ("body",),
    BlockKind.QUOTE: ("title", "body"),
}

# Scalar record fields sent to the translator, in payload order.
TRANSLATABLE_FIELDS: tuple[str, ...] = ("title", "short_title", "description", "cover_text")


@dataclass(slots=True)
class ReferenceEntry:
    """One URL of a reference-list block and its formatted citation."""

    link: Optional[str] = None
    citation: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"link": self.link, "citation": self.citation}
        if self.id is not None:
            result["id"] = self.id
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReferenceEntry":
        return cls(
            link=data.get("link") or data.get("url"),
            citation=data.get("citation") if "citation" in data else data.get("apa"),
            id=data.get("id"),
        )


@dataclass(slots=True)
class ContentBlock:
    """A tagged dynamic-zone block.

    ``payload`` keeps the fields of media and slider blocks opaque; the engine
    passes them through untouched.
    """

    kind: BlockKind
    id: Optional[int] = None
    title: Optional[str] = None
    body: Optional[str] = None
    references: List[ReferenceEntry] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_translatable(self) -> bool:
        return self.kind in TRANSLATABLE_BLOCK_FIELDS

    def without_identity(self) -> "ContentBlock":
        """Return a copy detached from this variant so a new block gets created."""

        return replace(
            self,
            id=None,
            references=[ReferenceEntry(link=r.link, citation=r.citation) for r in self.references],
            payload=dict(self.payload),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"__component": self.kind.value, **self.payload}
        if self.id is not None:
            result["id"] = self.id
        if self.title is not None:
            result["title"] = self.title
        if self.body is not None:
            result["body"] = self.body
        if self.kind == BlockKind.REFERENCE:
            result["url"] = [entry.to_dict() for entry in self.references]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentBlock":
        kind = BlockKind(data.get("__component") or data.get("kind"))
        known = {"__component", "kind", "id", "title", "body", "url", "references"}
        raw_refs = data.get("url") if "url" in data else data.get("references")
        references = [
            ReferenceEntry.from_dict(item)
            for item in (raw_refs or [])
            if isinstance(item, Mapping)
        ]
        return cls(
            kind=kind,
            id=data.get("id"),
            title=data.get("title"),
            body=data.get("body"),
            references=references,
            payload={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True, slots=True)
class FileDescriptor:
    """An uploaded file attached to a record."""

    name: str
    mime: str
    url: str
    id: Optional[int] = None

    @property
    def is_remote(self) -> bool:
        return self.url.startswith(("http://", "https://"))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "mime": self.mime, "url": self.url}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileDescriptor":
        return cls(
            id=data.get("id"),
            name=str(data.get("name") or ""),
            mime=str(data.get("mime") or ""),
            url=str(data.get("url") or ""),
        )


@dataclass(frozen=True, slots=True)
class AssetRef:
    """A stored media asset as returned by the media store."""

    id: int
    name: str
    url: str
    mime: str = "image/png"
    size: int = 0
    caption: Optional[str] = None
    alternative_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "mime": self.mime,
            "size": self.size,
            "caption": self.caption,
            "alternativeText": self.alternative_text,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssetRef":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            url=str(data.get("url") or ""),
            mime=str(data.get("mime") or "image/png"),
            size=int(data.get("size") or 0),
            caption=data.get("caption"),
            alternative_text=data.get("alternativeText") or data.get("alternative_text"),
        )


@dataclass(slots=True)
class RecordVariant:
    """One locale-specific stored record of a logical document."""

    id: int
    document_id: Optional[str]
    content_type: ContentType = ContentType.ARTICLE
    locale: Optional[str] = None
    slug: Optional[str] = None
    title: Optional[str] = None
    short_title: Optional[str] = None
    description: Optional[str] = None
    cover_text: Optional[str] = None
    blocks: List[ContentBlock] = field(default_factory=list)
    author: Optional[int] = None
    category: Optional[int] = None
    cover: Optional[AssetRef] = None
    report_file: Optional[FileDescriptor] = None
    published_at: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def canonical_slug(self) -> str:
        """Stable per-variant identity used as the slug."""

        return str(self.id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "documentId": self.document_id,
            "contentType": self.content_type.value,
            "locale": self.locale,
            "slug": self.slug,
            "title": self.title,
            "short_title": self.short_title,
            "description": self.description,
            "cover_text": self.cover_text,
            "blocks": [block.to_dict() for block in self.blocks],
            "author": self.author,
            "category": self.category,
            "cover": self.cover.to_dict() if self.cover else None,
            "report_file": self.report_file.to_dict() if self.report_file else None,
            "publishedAt": self.published_at.isoformat() if self.published_at else None,
            **self.extra,
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        content_type: Optional[ContentType] = None,
    ) -> "RecordVariant":
        """Build a record from a (possibly partial) storage payload."""

        known = {
            "id", "documentId", "document_id", "contentType", "content_type", "locale",
            "slug", "title", "short_title", "description", "cover_text", "blocks",
            "author", "category", "cover", "report_file", "publishedAt", "published_at",
        }
        raw_type = content_type or data.get("contentType") or data.get("content_type")
        published = data.get("publishedAt") or data.get("published_at")
        if isinstance(published, str):
            published = datetime.fromisoformat(published)
        cover = data.get("cover")
        report_file = data.get("report_file")
        return cls(
            id=int(data["id"]),
            document_id=data.get("documentId") or data.get("document_id"),
            content_type=ContentType(raw_type) if raw_type else ContentType.ARTICLE,
            locale=data.get("locale"),
            slug=data.get("slug"),
            title=data.get("title"),
            short_title=data.get("short_title"),
            description=data.get("description"),
            cover_text=data.get("cover_text"),
            blocks=[
                block if isinstance(block, ContentBlock) else ContentBlock.from_dict(block)
                for block in (data.get("blocks") or [])
            ],
            author=_relation_id(data.get("author")),
            category=_relation_id(data.get("category")),
            cover=_coerce(cover, AssetRef),
            report_file=_coerce(report_file, FileDescriptor),
            published_at=published,
            extra={k: v for k, v in data.items() if k not in known},
        )


def _relation_id(value: Any) -> Optional[int]:
    if isinstance(value, Mapping):
        value = value.get("id")
    if value is None:
        return None
    return int(value)


def _coerce(value: Any, kind: type) -> Any:
    if value is None or isinstance(value, kind):
        return value
    if isinstance(value, Mapping):
        return kind.from_dict(value)
    return None


@dataclass(frozen=True, slots=True)
class MutationEvent:
    """A lifecycle notification emitted by the storage collaborator."""

    content_type: ContentType
    action: MutationAction
    result: RecordVariant
    params: Mapping[str, Any] = field(default_factory=dict)


__all__ = [
    "AssetRef",
    "BlockKind",
    "ContentBlock",
    "ContentType",
    "FileDescriptor",
    "MutationAction",
    "MutationEvent",
    "RecordVariant",
    "ReferenceEntry",
    "TRANSLATABLE_BLOCK_FIELDS",
    "TRANSLATABLE_FIELDS",
]
