"""Media storage contract and a local-filesystem reference implementation."""

from __future__ import annotations

import itertools
import shutil
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from .. import logging_manager as log_mgr
from .types import AssetRef

logger = log_mgr.get_logger().getChild("records.media")


@dataclass(frozen=True, slots=True)
class UploadMetadata:
    """Descriptive fields attached to an uploaded asset."""

    name: str
    caption: Optional[str] = None
    alternative_text: Optional[str] = None
    mime: str = "image/png"


class MediaStore(ABC):
    """Abstract blob storage that turns a local file into an asset reference."""

    @abstractmethod
    async def upload(self, path: Path, metadata: UploadMetadata) -> AssetRef:
        """Store the file at ``path`` and return its :class:`AssetRef`."""


class LocalMediaStore(MediaStore):
    """Copy uploaded files into ``media_dir`` and hand out sequential ids."""

    def __init__(self, media_dir: Path, *, url_prefix: str = "/uploads") -> None:
        self._media_dir = Path(media_dir)
        self._url_prefix = url_prefix.rstrip("/")
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.uploads: List[AssetRef] = []

    @property
    def media_dir(self) -> Path:
        return self._media_dir

    def _copy(self, source: Path, destination: Path) -> int:
        self._media_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
        return destination.stat().st_size

    async def upload(self, path: Path, metadata: UploadMetadata) -> AssetRef:
        source = Path(path)
        with self._lock:
            asset_id = next(self._ids)
        stored_name = f"{asset_id}_{Path(metadata.name).name}"
        destination = self._media_dir / stored_name
        size = await run_in_threadpool(self._copy, source, destination)
        asset = AssetRef(
            id=asset_id,
            name=metadata.name,
            url=f"{self._url_prefix}/{stored_name}",
            mime=metadata.mime,
            size=size,
            caption=metadata.caption,
            alternative_text=metadata.alternative_text,
        )
        self.uploads.append(asset)
        logger.info(
            "Stored media asset %s",
            stored_name,
            extra={"event": "media.upload", "asset_id": asset_id},
        )
        return asset


__all__ = ["LocalMediaStore", "MediaStore", "UploadMetadata"]
