"""High-level configuration management for content-reactor."""
from __future__ import annotations

from .constants import (
    CONF_DIR,
    DEFAULT_CHINESE_LOCALE,
    DEFAULT_CONFIG_PATH,
    DEFAULT_ENGLISH_LOCALE,
    DEFAULT_LOCAL_CONFIG_PATH,
    SENSITIVE_CONFIG_KEYS,
)
from .loader import get_settings, load_configuration, reset_settings
from .settings import (
    EnvironmentOverrides,
    ReactorSettings,
    apply_settings_updates,
    load_environment_overrides,
    normalize_translation_provider,
)

__all__ = [
    "CONF_DIR",
    "DEFAULT_CHINESE_LOCALE",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_ENGLISH_LOCALE",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "SENSITIVE_CONFIG_KEYS",
    "EnvironmentOverrides",
    "ReactorSettings",
    "apply_settings_updates",
    "get_settings",
    "load_configuration",
    "load_environment_overrides",
    "normalize_translation_provider",
    "reset_settings",
]
