"""In-memory operation guards and content fingerprints for loop prevention."""

from __future__ import annotations

import hashlib
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Tuple

from .. import logging_manager as log_mgr
from ..locales import normalize_locale_tag
from ..records.types import TRANSLATABLE_BLOCK_FIELDS, TRANSLATABLE_FIELDS, RecordVariant

logger = log_mgr.get_logger().getChild("services.guard")

Clock = Callable[[], float]


def translation_key(document_id: str, source_locale: str, target_locale: str) -> str:
    return f"translate:{document_id}:{source_locale}->{target_locale}"


def cover_key(record_id: int) -> str:
    return f"cover:{record_id}"


def slug_key(record_id: int) -> str:
    return f"slug:{record_id}"


def citations_key(document_id: str) -> str:
    return f"citations:{document_id}"


class GuardBusyError(RuntimeError):
    """Raised by :meth:`OperationGuard.held` when the key is already active."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Operation {key!r} is already in progress")
        self.key = key


class OperationGuard(ABC):
    """Process-local registry of in-flight operations keyed by string."""

    @abstractmethod
    def is_active(self, key: str) -> bool:
        """Return True while ``key`` was started and neither ended nor expired."""

    @abstractmethod
    def start(self, key: str, *, ttl_seconds: Optional[float] = None) -> None:
        """Mark ``key`` as in flight, refreshing its timestamp."""

    @abstractmethod
    def end(self, key: str) -> None:
        """Forget ``key``. Ending an unknown key is a no-op."""

    @abstractmethod
    def try_start(self, key: str, *, ttl_seconds: Optional[float] = None) -> bool:
        """Atomically start ``key`` unless it is active; return whether it started."""

    @contextmanager
    def held(self, key: str, *, ttl_seconds: Optional[float] = None) -> Iterator[None]:
        if not self.try_start(key, ttl_seconds=ttl_seconds):
            raise GuardBusyError(key)
        try:
            yield
        finally:
            self.end(key)


class InMemoryOperationGuard(OperationGuard):
    """Dictionary of key -> (start time, ttl) protected by a lock.

    Entries older than their TTL are treated as inactive and evicted lazily, so
    a crashed operation never blocks its key for longer than the TTL.
    """

    def __init__(self, ttl_seconds: float = 60.0, *, clock: Clock = time.monotonic) -> None:
        self._default_ttl = float(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, float]] = {}

    def _active_locked(self, key: str, now: float) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        started_at, ttl = entry
        if now - started_at >= ttl:
            del self._entries[key]
            logger.debug(
                "Guard entry expired",
                extra={"event": "guard.expired", "guard_key": key},
            )
            return False
        return True

    def is_active(self, key: str) -> bool:
        with self._lock:
            return self._active_locked(key, self._clock())

    def start(self, key: str, *, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            self._entries[key] = (self._clock(), ttl)

    def end(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def try_start(self, key: str, *, ttl_seconds: Optional[float] = None) -> bool:
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            now = self._clock()
            if self._active_locked(key, now):
                return False
            self._entries[key] = (now, ttl)
            return True

    def active_keys(self) -> list[str]:
        with self._lock:
            now = self._clock()
            return [key for key in list(self._entries) if self._active_locked(key, now)]


def fingerprint_record(record: RecordVariant) -> str:
    """Hash the translatable content of ``record``."""

    parts = [f"{name}={getattr(record, name) or ''}" for name in TRANSLATABLE_FIELDS]
    for block in record.blocks:
        for name in TRANSLATABLE_BLOCK_FIELDS.get(block.kind, ()):
            parts.append(f"{block.kind.value}.{name}={getattr(block, name) or ''}")
    digest = hashlib.sha256("\x1f".join(parts).encode("utf-8"))
    return digest.hexdigest()


def fingerprint_key(document_id: str, locale: str) -> str:
    return f"{document_id}:{normalize_locale_tag(locale)}"


class ContentFingerprints:
    """Remember the content the engine itself is about to write.

    A mutation event whose record hashes to a remembered fingerprint is an echo
    of an engine write and must not re-arm translation.
    """

    def __init__(self, ttl_seconds: float = 3600.0, *, clock: Clock = time.monotonic) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[str, float]] = {}

    def remember(self, key: str, fingerprint: str) -> None:
        with self._lock:
            self._entries[key] = (fingerprint, self._clock())

    def matches(self, key: str, fingerprint: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            stored, remembered_at = entry
            if self._clock() - remembered_at >= self._ttl:
                del self._entries[key]
                return False
            return stored == fingerprint

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


__all__ = [
    "Clock",
    "ContentFingerprints",
    "GuardBusyError",
    "InMemoryOperationGuard",
    "OperationGuard",
    "citations_key",
    "cover_key",
    "fingerprint_key",
    "fingerprint_record",
    "slug_key",
    "translation_key",
]
