"""Shared constants for the configuration manager package."""
from __future__ import annotations

import tempfile
from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
SCRIPT_DIR = MODULE_DIR.parent.parent.resolve()
CONF_DIR = SCRIPT_DIR / "conf"
DEFAULT_CONFIG_PATH = CONF_DIR / "config.json"
DEFAULT_LOCAL_CONFIG_PATH = CONF_DIR / "config.local.json"

DEFAULT_ENGLISH_LOCALE = "en"
DEFAULT_CHINESE_LOCALE = "zh-Hant-HK"
DEFAULT_TRANSLATION_PROVIDER = "deepl"
VALID_TRANSLATION_PROVIDERS = {"deepl"}

DEEPL_API_URL = "https://api.deepl.com"
DEEPL_FREE_API_URL = "https://api-free.deepl.com"
DEFAULT_ZOTERO_SERVER = "http://localhost:1969"
CROSSREF_API_URL = "https://api.crossref.org"
DEFAULT_USER_AGENT = "content-reactor/1.0"

DEFAULT_TRANSLATION_GUARD_TTL = 60.0
DEFAULT_SLUG_GUARD_TTL = 60.0
DEFAULT_COVER_GUARD_TTL = 120.0
DEFAULT_CITATION_GUARD_TTL = 120.0
DEFAULT_FINGERPRINT_TTL = 3600.0
DEFAULT_HTTP_TIMEOUT = 20.0
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_COVER_SCALE = 2.0

DEFAULT_PUBLIC_RELATIVE = Path("public")
DEFAULT_MEDIA_RELATIVE = DEFAULT_PUBLIC_RELATIVE / "uploads"
DEFAULT_TMP_DIR = Path(tempfile.gettempdir())

SENSITIVE_CONFIG_KEYS = {"deepl_api_key"}

__all__ = [
    "MODULE_DIR",
    "SCRIPT_DIR",
    "CONF_DIR",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "DEFAULT_ENGLISH_LOCALE",
    "DEFAULT_CHINESE_LOCALE",
    "DEFAULT_TRANSLATION_PROVIDER",
    "VALID_TRANSLATION_PROVIDERS",
    "DEEPL_API_URL",
    "DEEPL_FREE_API_URL",
    "DEFAULT_ZOTERO_SERVER",
    "CROSSREF_API_URL",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TRANSLATION_GUARD_TTL",
    "DEFAULT_SLUG_GUARD_TTL",
    "DEFAULT_COVER_GUARD_TTL",
    "DEFAULT_CITATION_GUARD_TTL",
    "DEFAULT_FINGERPRINT_TTL",
    "DEFAULT_HTTP_TIMEOUT",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_COVER_SCALE",
    "DEFAULT_PUBLIC_RELATIVE",
    "DEFAULT_MEDIA_RELATIVE",
    "DEFAULT_TMP_DIR",
    "SENSITIVE_CONFIG_KEYS",
]
