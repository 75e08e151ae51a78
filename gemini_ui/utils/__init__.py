"""Utilities for Gemini UI."""

from .scope_resolver import resolve_server, resolve_servers

__all__ = [
    'resolve_server',
    'resolve_servers'
]
