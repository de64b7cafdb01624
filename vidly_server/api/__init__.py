"""
HTTP API for the Vidly server.

Exposes genres, customers, movies, rentals, returns, users and auth
under /api. See app.create_app().
"""

from .app import create_app

__all__ = ["create_app"]
