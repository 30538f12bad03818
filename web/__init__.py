"""Flask web layer of the back-office."""

from .app import create_app

__all__ = ["create_app"]
