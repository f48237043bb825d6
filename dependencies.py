"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Everything they return is built once in the
application lifespan and stored on app.state.
"""

from __future__ import annotations

from fastapi import Request

from config import AppSettings, IngestPolicy
from services.tracking_service import TrackingService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_policy(request: Request) -> IngestPolicy:
    """Return the immutable IngestPolicy stored on app.state."""
    return request.app.state.policy


def get_tracking_service(request: Request) -> TrackingService:
    """Return the shared TrackingService from app.state."""
    return request.app.state.tracking_service
