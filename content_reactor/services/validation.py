"""Per-locale character limits enforced before articles are written."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .. import logging_manager as log_mgr
from ..locales import is_chinese
from .errors import CharacterLimitError

logger = log_mgr.get_logger().getChild("services.validation")

CHINESE_LIMITS: Dict[str, int] = {"title": 45, "short_title": 22, "description": 55}
ENGLISH_LIMITS: Dict[str, int] = {"title": 90, "short_title": 45, "description": 100}


def limits_for_locale(locale: Optional[str]) -> Dict[str, int]:
    return CHINESE_LIMITS if is_chinese(locale) else ENGLISH_LIMITS


def locale_from_params(params: Mapping[str, Any], default: str = "en") -> str:
    """Return the locale of a before-write request (``params.locale`` wins)."""

    locale = params.get("locale")
    if isinstance(locale, str) and locale:
        return locale
    data = params.get("data")
    if isinstance(data, Mapping):
        nested = data.get("locale")
        if isinstance(nested, str) and nested:
            return nested
    return default


def validate_character_limits(data: Mapping[str, Any], locale: Optional[str]) -> None:
    """Raise :class:`CharacterLimitError` when a field exceeds its limit.

    Only string values present in ``data`` are checked, so partial updates
    validate just the fields they touch.
    """

    limits = limits_for_locale(locale)
    errors: Dict[str, str] = {}
    for field, limit in limits.items():
        value = data.get(field)
        if not isinstance(value, str):
            continue
        length = len(value)
        if length > limit:
            errors[field] = (
                f"Exceeds {limit} character limit by {length - limit} (current: {length})"
            )
    if errors:
        logger.warning(
            "Character limit exceeded for %s locale",
            locale,
            extra={"event": "validation.character_limit", "fields": sorted(errors)},
        )
        raise CharacterLimitError(errors)


def validate_before_write(params: Mapping[str, Any], *, default_locale: str = "en") -> None:
    """Validate the payload of a before-create/before-update request."""

    data = params.get("data")
    if not isinstance(data, Mapping):
        return
    validate_character_limits(data, locale_from_params(params, default_locale))


__all__ = [
    "CHINESE_LIMITS",
    "ENGLISH_LIMITS",
    "limits_for_locale",
    "locale_from_params",
    "validate_before_write",
    "validate_character_limits",
]
