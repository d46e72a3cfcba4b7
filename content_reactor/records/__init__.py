"""Data model and storage collaborators for content records."""

from .media import LocalMediaStore, MediaStore, UploadMetadata
from .store import DuplicateVariantError, InMemoryRecordStore, MutationListener, RecordStore
from .types import (
    AssetRef,
    BlockKind,
    ContentBlock,
    ContentType,
    FileDescriptor,
    MutationAction,
    MutationEvent,
    RecordVariant,
    ReferenceEntry,
    TRANSLATABLE_BLOCK_FIELDS,
    TRANSLATABLE_FIELDS,
)

__all__ = [
    "AssetRef",
    "BlockKind",
    "ContentBlock",
    "ContentType",
    "DuplicateVariantError",
    "FileDescriptor",
    "InMemoryRecordStore",
    "LocalMediaStore",
    "MediaStore",
    "MutationAction",
    "MutationEvent",
    "MutationListener",
    "RecordStore",
    "RecordVariant",
    "ReferenceEntry",
    "TRANSLATABLE_BLOCK_FIELDS",
    "TRANSLATABLE_FIELDS",
    "UploadMetadata",
]
