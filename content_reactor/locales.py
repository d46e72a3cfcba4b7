"""Locale tag mapping between record variants and the translation provider.

Two tables live here:

* the *direction* table deciding which sibling locale a variant is translated
  into (English <-> Traditional Chinese, everything else untranslated);
* the *provider vocabulary* table turning record locale tags into the codes
  the translation service understands, with a prefix fallback so that new
  locale tag variants introduced upstream keep working.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .config_manager.constants import DEFAULT_CHINESE_LOCALE, DEFAULT_ENGLISH_LOCALE

LanguageRole = Literal["source", "target"]

_TARGET_LANGUAGE_CODES = {
    "en": "EN-US",
    "en-us": "EN-US",
    "en-gb": "EN-GB",
    "zh": "ZH-HANT",
    "zh-tw": "ZH-HANT",
    "zh-hk": "ZH-HANT",
    "zh-hant": "ZH-HANT",
    "zh-hant-hk": "ZH-HANT",
    "zh-hant-tw": "ZH-HANT",
    "zh-hans": "ZH-HANS",
    "zh-cn": "ZH-HANS",
}

_SOURCE_LANGUAGE_CODES = {
    "en": "EN",
    "en-us": "EN",
    "en-gb": "EN",
    "zh": "ZH",
    "zh-tw": "ZH",
    "zh-hk": "ZH",
    "zh-hant": "ZH",
    "zh-hant-hk": "ZH",
    "zh-hans": "ZH",
    "zh-cn": "ZH",
}

_SIMPLIFIED_MARKERS = ("hans", "cn", "sg")


def normalize_locale_tag(value: Optional[str]) -> Optional[str]:
    """Return a lower-cased, hyphenated locale tag or ``None`` when blank."""

    if not isinstance(value, str):
        return None
    cleaned = value.strip().replace("_", "-").lower()
    return cleaned or None


def is_chinese(locale: Optional[str]) -> bool:
    normalized = normalize_locale_tag(locale)
    return bool(normalized and normalized.startswith("zh"))


def resolve_provider_language(locale: str, *, role: LanguageRole = "target") -> str:
    """Map a record locale tag to the provider's language code.

    Unmapped tags fall back by prefix: anything starting with ``zh`` becomes
    Traditional Chinese (Simplified only when the tag says so), anything else
    becomes English.
    """

    normalized = normalize_locale_tag(locale) or ""
    if role == "source":
        code = _SOURCE_LANGUAGE_CODES.get(normalized)
        if code:
            return code
        return "ZH" if normalized.startswith("zh") else "EN"

    code = _TARGET_LANGUAGE_CODES.get(normalized)
    if code:
        return code
    if normalized.startswith("zh"):
        subtags = normalized.split("-")[1:]
        if any(tag in _SIMPLIFIED_MARKERS for tag in subtags):
            return "ZH-HANS"
        return "ZH-HANT"
    return "EN-US"


@dataclass(frozen=True, slots=True)
class LocaleTable:
    """Fixed direction table for the bilingual translation pipeline."""

    english_locale: str = DEFAULT_ENGLISH_LOCALE
    chinese_locale: str = DEFAULT_CHINESE_LOCALE

    def target_for(self, locale: Optional[str]) -> Optional[str]:
        """Return the sibling locale ``locale`` is translated into, if any.

        Only the configured English tag itself is translated; regional English
        variants such as ``en-GB`` have no sibling.
        """

        normalized = normalize_locale_tag(locale)
        if normalized and normalized == normalize_locale_tag(self.english_locale):
            return self.chinese_locale
        if is_chinese(locale):
            return self.english_locale
        return None


__all__ = [
    "LocaleTable",
    "is_chinese",
    "normalize_locale_tag",
    "resolve_provider_language",
]
