"""Gemini UI - MCP server configuration and process management for the Gemini CLI."""

__version__ = "0.1.0"

# Export main CLI for convenience
from .cli.main import cli

__all__ = ['cli']
