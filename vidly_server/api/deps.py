"""FastAPI dependencies resolving shared components from app state."""

from __future__ import annotations

from fastapi import Request

from ..config import Settings
from ..rentals import RentalLifecycleManager
from ..store import Database


def get_database(request: Request) -> Database:
    """Get database from app state."""
    return request.app.state.database


def get_lifecycle(request: Request) -> RentalLifecycleManager:
    """Get rental lifecycle manager from app state."""
    return request.app.state.lifecycle


def get_settings(request: Request) -> Settings:
    """Get settings from app state."""
    return request.app.state.settings
