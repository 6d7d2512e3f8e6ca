"""REST API layer for kubedep.

Exposes:
    create_app -- FastAPI application factory.
"""

from kubedep.api.app import create_app

__all__ = ["create_app"]
