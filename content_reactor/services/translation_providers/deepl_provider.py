"""DeepL translation provider implementation."""

from __future__ import annotations

from typing import Optional

import requests

from ... import logging_manager as log_mgr
from ..errors import ExternalServiceError
from .base import Translator

logger = log_mgr.get_logger().getChild("services.translation.deepl")

_LANGUAGE_LABELS = {
    "ZH-HANT": "Traditional Chinese",
    "ZH-HANS": "Simplified Chinese",
}


class DeepLTranslator(Translator):
    """Translate text through the DeepL REST API (``/v2/translate``)."""

    name = "deepl"
    requires_api_key = True

    def __init__(
        self,
        *,
        api_key: Optional[str],
        api_url: str,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        super().__init__(session=session, api_key=api_key, timeout_seconds=timeout_seconds)
        self._api_url = api_url.rstrip("/")

    def _translate(self, text: str, source_code: str, target_code: str) -> str:
        logger.debug(
            "Translating from %s to %s (%s)",
            source_code,
            target_code,
            _LANGUAGE_LABELS.get(target_code, target_code),
            extra={"event": "translation.deepl.request", "characters": len(text)},
        )
        try:
            response = self._session.post(
                f"{self._api_url}/v2/translate",
                data={"text": text, "source_lang": source_code, "target_lang": target_code},
                headers={"Authorization": f"DeepL-Auth-Key {self._api_key}"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ExternalServiceError(
                f"Translation failed: {exc}", service=self.name
            ) from exc

        if response.status_code != 200:
            raise ExternalServiceError(
                f"Translation failed: DeepL responded with HTTP {response.status_code}",
                service=self.name,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            translated = payload["translations"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError(
                "Translation failed: malformed DeepL response", service=self.name
            ) from exc
        if not isinstance(translated, str):
            raise ExternalServiceError(
                "Translation failed: malformed DeepL response", service=self.name
            )
        return translated


__all__ = ["DeepLTranslator"]
