"""Application factory for the reaction web API."""

from __future__ import annotations

import os
import re
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import load_environment
from .. import logging_manager as log_mgr
from ..services.engine import ReactionEngine
from .dependencies import get_engine
from .errors import register_exception_handlers
from .routes import article_router, lifecycle_router, report_router, translate_router

load_environment()

logger = log_mgr.get_logger().getChild("webapi.application")

# The CMS admin panel usually runs on 1337 during development.
DEFAULT_LOCAL_ORIGINS = (
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:1337",
    "http://127.0.0.1:1337",
)


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials may be sent."""

    if raw_value is None:
        return list(DEFAULT_LOCAL_ORIGINS), True
    origins = [token for token in re.split(r"[\s,]+", raw_value.strip()) if token]
    if "*" in origins:
        return ["*"], False
    return origins, bool(origins)


def _configure_cors(app: FastAPI) -> None:
    origins, allow_credentials = _parse_cors_origins(os.environ.get("REACTOR_API_CORS_ORIGINS"))
    if not origins:
        logger.info("CORS disabled; REACTOR_API_CORS_ORIGINS is empty")
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
    )


def _engine_provider(app: FastAPI) -> Callable[[], ReactionEngine]:
    return app.dependency_overrides.get(get_engine, get_engine)


def create_app() -> FastAPI:
    """Build the FastAPI app serving lifecycle hooks and explicit triggers."""

    app = FastAPI(title="content-reactor API", version="0.1.0")
    register_exception_handlers(app)

    @app.on_event("startup")
    async def _announce_engine() -> None:
        try:
            engine = _engine_provider(app)()
        except Exception:  # pragma: no cover - surfaced on first request instead
            logger.exception("Reaction engine could not be built at startup")
            return
        logger.info(
            "Reaction API ready",
            extra={
                "event": "api.ready",
                "translation_enabled": engine.translator.is_available,
                "chinese_locale": engine.settings.chinese_locale,
            },
        )

    @app.on_event("shutdown")
    async def _close_engine() -> None:
        try:
            await _engine_provider(app)().aclose()
        except Exception:  # pragma: no cover
            logger.exception("Failed to close the reaction engine")

    _configure_cors(app)

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    for router in (lifecycle_router, article_router, report_router, translate_router):
        app.include_router(router)
    return app


__all__ = ["create_app"]
