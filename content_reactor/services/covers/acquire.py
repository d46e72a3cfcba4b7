"""Fetch the bytes of a record's attached file from remote or local storage."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import requests

from ... import logging_manager as log_mgr
from ...records.types import FileDescriptor
from ..errors import DataInconsistencyError, ExternalServiceError

logger = log_mgr.get_logger().getChild("services.covers.acquire")


def _download(
    url: str,
    *,
    session: requests.Session,
    timeout: float,
    max_redirects: int,
) -> bytes:
    session.max_redirects = max_redirects
    try:
        response = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.TooManyRedirects as exc:
        raise ExternalServiceError(
            f"Failed to download file: more than {max_redirects} redirects", service="download"
        ) from exc
    except requests.RequestException as exc:
        raise ExternalServiceError(f"Failed to download file: {exc}", service="download") from exc
    if response.status_code != 200:
        raise ExternalServiceError(
            f"Failed to download file: HTTP {response.status_code}",
            service="download",
            status_code=response.status_code,
        )
    logger.info(
        "Downloaded %s bytes",
        len(response.content),
        extra={"event": "covers.download.complete", "url": url},
    )
    return response.content


def resolve_local_path(url: str, public_dir: Path) -> Path:
    """Map a storage-relative URL (``/uploads/x.pdf``) below ``public_dir``."""

    relative = url.strip().lstrip("/\\")
    root = Path(public_dir).resolve()
    candidate = (root / relative).resolve()
    if root != candidate and root not in candidate.parents:
        raise DataInconsistencyError(f"File path escapes the public directory: {url}")
    return candidate


def acquire_file_bytes(
    descriptor: FileDescriptor,
    *,
    public_dir: Path,
    session: Optional[requests.Session] = None,
    timeout: float = 20.0,
    max_redirects: int = 5,
) -> bytes:
    """Return the content of ``descriptor``.

    Remote URLs are downloaded with redirects capped at ``max_redirects``;
    anything else is read from below ``public_dir``.

    Args:
        descriptor: The file referenced by the report record.
        public_dir: Root for files stored locally.
        session: HTTP session to reuse; a temporary one is opened otherwise.
        timeout: Download timeout in seconds.
        max_redirects: Redirect cap for remote URLs.

    Returns:
        The raw file bytes.

    Raises:
        DataInconsistencyError: The local file is missing or outside ``public_dir``.
        ExternalServiceError: The download failed.
    """

    if descriptor.is_remote:
        owns_session = session is None
        active = session or requests.Session()
        try:
            return _download(
                descriptor.url, session=active, timeout=timeout, max_redirects=max_redirects
            )
        finally:
            if owns_session:
                active.close()

    path = resolve_local_path(descriptor.url, public_dir)
    if not path.is_file():
        raise DataInconsistencyError(f"File not found at path: {path}")
    logger.debug("Reading local file %s", path, extra={"event": "covers.read_local"})
    return path.read_bytes()


__all__ = ["acquire_file_bytes", "resolve_local_path"]
