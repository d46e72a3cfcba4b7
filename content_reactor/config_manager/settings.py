"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from content_reactor import logging_manager

from .constants import (
    DEEPL_API_URL,
    DEEPL_FREE_API_URL,
    DEFAULT_CHINESE_LOCALE,
    DEFAULT_CITATION_GUARD_TTL,
    DEFAULT_COVER_GUARD_TTL,
    DEFAULT_COVER_SCALE,
    DEFAULT_ENGLISH_LOCALE,
    DEFAULT_FINGERPRINT_TTL,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MEDIA_RELATIVE,
    DEFAULT_PUBLIC_RELATIVE,
    DEFAULT_SLUG_GUARD_TTL,
    DEFAULT_TMP_DIR,
    DEFAULT_TRANSLATION_GUARD_TTL,
    DEFAULT_TRANSLATION_PROVIDER,
    DEFAULT_USER_AGENT,
    DEFAULT_ZOTERO_SERVER,
    VALID_TRANSLATION_PROVIDERS,
)

logger = logging_manager.get_logger().getChild("config")


class ReactorSettings(BaseModel):
    """Typed representation of the application configuration."""

    model_config = ConfigDict(extra="allow")

    english_locale: str = DEFAULT_ENGLISH_LOCALE
    chinese_locale: str = DEFAULT_CHINESE_LOCALE
    default_locale: str = DEFAULT_ENGLISH_LOCALE
    translation_provider: str = DEFAULT_TRANSLATION_PROVIDER
    deepl_api_key: Optional[SecretStr] = None
    deepl_api_url: Optional[str] = None
    translation_guard_ttl_seconds: float = DEFAULT_TRANSLATION_GUARD_TTL
    slug_guard_ttl_seconds: float = DEFAULT_SLUG_GUARD_TTL
    cover_guard_ttl_seconds: float = DEFAULT_COVER_GUARD_TTL
    citation_guard_ttl_seconds: float = DEFAULT_CITATION_GUARD_TTL
    fingerprint_ttl_seconds: float = DEFAULT_FINGERPRINT_TTL
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    cover_render_scale: float = DEFAULT_COVER_SCALE
    public_dir: str = str(DEFAULT_PUBLIC_RELATIVE)
    media_dir: str = str(DEFAULT_MEDIA_RELATIVE)
    tmp_dir: str = str(DEFAULT_TMP_DIR)
    zotero_translation_server: str = DEFAULT_ZOTERO_SERVER
    crossref_mailto: str = "admin@example.com"
    user_agent: str = DEFAULT_USER_AGENT
    debug: bool = False

    @property
    def translation_enabled(self) -> bool:
        """Return True when translation credentials are configured."""

        if self.deepl_api_key is None:
            return False
        return bool(self.deepl_api_key.get_secret_value().strip())

    def resolved_deepl_api_url(self) -> str:
        """Return the DeepL endpoint, picking the free tier for ``:fx`` keys."""

        if self.deepl_api_url:
            return self.deepl_api_url.rstrip("/")
        if self.deepl_api_key is not None and self.deepl_api_key.get_secret_value().endswith(":fx"):
            return DEEPL_FREE_API_URL
        return DEEPL_API_URL

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured directory relative to the working directory."""

        candidate = Path(value).expanduser()
        if not candidate.is_absolute():
            candidate = Path.cwd() / candidate
        return candidate


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", env_nested_delimiter="__", extra="ignore")

    chinese_locale: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_CHINESE_LOCALE")
    )
    default_locale: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_DEFAULT_LOCALE")
    )
    translation_provider: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TRANSLATION_PROVIDER", "REACTOR_TRANSLATION_PROVIDER"),
    )
    deepl_api_key: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("DEEPL_API_KEY", "REACTOR_DEEPL_API_KEY")
    )
    deepl_api_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DEEPL_API_URL", "REACTOR_DEEPL_API_URL")
    )
    translation_guard_ttl_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_TRANSLATION_GUARD_TTL")
    )
    slug_guard_ttl_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_SLUG_GUARD_TTL")
    )
    cover_guard_ttl_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_COVER_GUARD_TTL")
    )
    citation_guard_ttl_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_CITATION_GUARD_TTL")
    )
    http_timeout_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_HTTP_TIMEOUT")
    )
    public_dir: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_PUBLIC_DIR", "PUBLIC_DIR")
    )
    media_dir: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_MEDIA_DIR")
    )
    tmp_dir: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_TMP_DIR", "TMPDIR", "TMP")
    )
    zotero_translation_server: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ZOTERO_TRANSLATION_SERVER", "REACTOR_ZOTERO_SERVER"),
    )
    crossref_mailto: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("CROSSREF_MAILTO", "REACTOR_CROSSREF_MAILTO")
    )
    debug: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("REACTOR_DEBUG")
    )


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(
    settings: ReactorSettings, updates: Dict[str, Any]
) -> ReactorSettings:
    """Return a copy of ``settings`` updated with ``updates`` if any values exist."""

    if not updates:
        return settings
    return settings.model_copy(update=updates)


def normalize_translation_provider(
    candidate: Any, *, default: str = DEFAULT_TRANSLATION_PROVIDER
) -> str:
    """Return a normalised translation provider identifier."""

    if isinstance(candidate, str):
        normalized = candidate.strip().lower()
        if normalized in VALID_TRANSLATION_PROVIDERS:
            return normalized
    return default


__all__ = [
    "ReactorSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
    "normalize_translation_provider",
]
