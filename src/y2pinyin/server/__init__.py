"""Web server for the single-page lyrics client."""

from .app import create_app

__all__ = ["create_app"]
