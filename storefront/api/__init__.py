"""
API Module

HTTP API layer with FastAPI.
"""

from .app import create_app

__all__ = ["create_app"]
