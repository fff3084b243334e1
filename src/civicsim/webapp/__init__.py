"""Flask web application for civicsim."""

from .app import create_app

__all__ = ["create_app"]
