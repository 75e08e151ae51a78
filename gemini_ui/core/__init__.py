"""Core functionality for Gemini UI."""

from .settings import Settings

__all__ = [
    'Settings'
]
