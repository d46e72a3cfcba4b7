"""Serve the reaction API: ``python -m content_reactor.webapi``."""

from __future__ import annotations

import argparse
import os
from typing import Sequence

import uvicorn

from .. import logging_manager as log_mgr

APP_FACTORY = "content_reactor.webapi.application:create_app"
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-reactor-api",
        description="Serve lifecycle hooks and reaction endpoints over HTTP.",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("REACTOR_API_HOST", "127.0.0.1"),
        help="Interface to bind (default: %(default)s, env REACTOR_API_HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("REACTOR_API_PORT", "8000")),
        help="Port to listen on (default: %(default)s, env REACTOR_API_PORT)",
    )
    parser.add_argument("--reload", action="store_true", help="Restart on source changes.")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=LOG_LEVELS,
        help="uvicorn log level (default: %(default)s)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = log_mgr.get_logger().getChild("webapi")
    logger.info(
        "Starting reaction API",
        extra={"event": "api.start", "host": args.host, "port": args.port},
    )
    try:
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=args.log_level,
        )
    except KeyboardInterrupt:  # pragma: no cover - interactive shutdown
        logger.info("Reaction API interrupted", extra={"event": "api.interrupted"})
        return 130
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
