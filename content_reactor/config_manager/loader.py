"""Configuration loading utilities."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from content_reactor import logging_manager

from .constants import DEFAULT_CONFIG_PATH, DEFAULT_LOCAL_CONFIG_PATH, SENSITIVE_CONFIG_KEYS
from .settings import (
    ReactorSettings,
    apply_settings_updates,
    load_environment_overrides,
    normalize_translation_provider,
)

logger = logging_manager.get_logger().getChild("config.loader")


_ACTIVE_SETTINGS: Optional[ReactorSettings] = None


def _read_config_json(path: Optional[Path], label: str = "configuration") -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("No %s found at %s.", label, path)
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(
            "Error loading %s from %s: %s. Proceeding without it.",
            label,
            path,
            e,
            extra={"event": "config.file.invalid"},
        )
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring non-object %s at %s", label, path)
        return {}
    logger.debug("Loaded %s from %s", label, path)
    return data


def _deep_merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def _finalise(settings: ReactorSettings) -> ReactorSettings:
    provider = normalize_translation_provider(settings.translation_provider)
    if provider != settings.translation_provider:
        settings = apply_settings_updates(settings, {"translation_provider": provider})
    return settings


def load_configuration(config_file: Optional[str] = None) -> Dict[str, Any]:
    """Load the layered configuration and return a dictionary view.

    Layers, lowest precedence first: ``conf/config.json``, the local override
    file (``conf/config.local.json`` or ``config_file``), environment variables.
    """

    global _ACTIVE_SETTINGS

    base_payload = _read_config_json(DEFAULT_CONFIG_PATH, label="default configuration")

    if config_file:
        override_path = Path(config_file).expanduser()
        if not override_path.is_absolute():
            override_path = (Path.cwd() / override_path).resolve()
    else:
        override_path = DEFAULT_LOCAL_CONFIG_PATH

    override_config = _read_config_json(override_path, label="local configuration")
    base_payload = _deep_merge_dict(base_payload, override_config)

    try:
        settings = ReactorSettings.model_validate(base_payload)
    except ValidationError as exc:
        raise RuntimeError("Invalid configuration detected") from exc

    settings = apply_settings_updates(settings, load_environment_overrides())
    _ACTIVE_SETTINGS = _finalise(settings)

    return _ACTIVE_SETTINGS.model_dump(mode="python", exclude=SENSITIVE_CONFIG_KEYS)


def get_settings() -> ReactorSettings:
    """Return the currently loaded :class:`ReactorSettings` instance."""

    global _ACTIVE_SETTINGS
    if _ACTIVE_SETTINGS is None:
        load_configuration()
    assert _ACTIVE_SETTINGS is not None
    return _ACTIVE_SETTINGS


def reset_settings() -> None:
    """Forget the cached settings so the next access reloads them."""

    global _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = None


__all__ = ["get_settings", "load_configuration", "reset_settings"]
