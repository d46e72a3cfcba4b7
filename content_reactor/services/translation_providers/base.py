"""Base class for machine translation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import requests

from ...locales import resolve_provider_language


class Translator(ABC):
    """Translate short text values between record locales.

    Providers implement :meth:`_translate`, receiving provider language codes.
    Callers pass record locale tags to :meth:`translate`; blank input is
    returned unchanged without contacting the provider.
    """

    name: str
    requires_api_key: bool = True

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        api_key: Optional[str] = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        self._session = session or requests.Session()
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._owns_session = session is None

    @property
    def is_available(self) -> bool:
        """Return True if the provider has the credentials it needs."""
        if self.requires_api_key and not (self._api_key or "").strip():
            return False
        return True

    def translate(self, text: Optional[str], source_locale: str, target_locale: str) -> Optional[str]:
        if text is None or not text.strip():
            return text
        return self._translate(
            text,
            resolve_provider_language(source_locale, role="source"),
            resolve_provider_language(target_locale, role="target"),
        )

    @abstractmethod
    def _translate(self, text: str, source_code: str, target_code: str) -> str:
        """Translate ``text`` using provider language codes."""

    def close(self) -> None:
        """Release resources."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "Translator":
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["Translator"]
