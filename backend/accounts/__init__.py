"""Expose the application factory at package level.

``from accounts import create_app`` is the entry point used by gunicorn and
the Flask CLI (``FLASK_APP=accounts:create_app``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
