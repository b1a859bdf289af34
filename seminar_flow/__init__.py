"""Boost Seminario backend package."""

from .app import create_app
from .config import get_settings

__all__ = ["create_app", "get_settings"]
