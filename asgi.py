"""
ASGI entry point for the visit tracker.

Settings are read from the environment (and ``.env``) at import time.

Run with:
    uvicorn asgi:app --proxy-headers
"""

from app import create_app

app = create_app()
