"""Dependency providers for the reaction web API."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from ..services.engine import ReactionEngine, build_engine

_CONFIGURED_ENGINE: Optional[ReactionEngine] = None


def configure_engine(engine: Optional[ReactionEngine]) -> None:
    """Install ``engine`` as the process-wide instance (``None`` resets it)."""

    global _CONFIGURED_ENGINE
    _CONFIGURED_ENGINE = engine


@lru_cache
def _default_engine() -> ReactionEngine:
    engine = build_engine()
    engine.attach()
    return engine


def get_engine() -> ReactionEngine:
    """Return the reaction engine shared by all requests."""

    if _CONFIGURED_ENGINE is not None:
        return _CONFIGURED_ENGINE
    return _default_engine()


__all__ = ["configure_engine", "get_engine"]
