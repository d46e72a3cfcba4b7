"""Translation provider implementations.

Providers share the :class:`Translator` contract; DeepL is the only backend.
"""

from __future__ import annotations

from typing import Optional

import requests

from ...config_manager import ReactorSettings, normalize_translation_provider
from .base import Translator
from .deepl_provider import DeepLTranslator


def create_translator(
    settings: ReactorSettings,
    *,
    session: Optional[requests.Session] = None,
) -> Translator:
    """Build the translator selected by ``settings``."""

    provider = normalize_translation_provider(settings.translation_provider)
    if provider == "deepl":
        api_key = (
            settings.deepl_api_key.get_secret_value() if settings.deepl_api_key else None
        )
        return DeepLTranslator(
            api_key=api_key,
            api_url=settings.resolved_deepl_api_url(),
            session=session,
            timeout_seconds=settings.http_timeout_seconds,
        )
    raise ValueError(f"Unsupported translation provider: {provider}")


__all__ = ["DeepLTranslator", "Translator", "create_translator"]
