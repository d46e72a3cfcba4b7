"""FastAPI surface for lifecycle events and explicit reaction triggers."""

from .application import create_app

__all__ = ["create_app"]
