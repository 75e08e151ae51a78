"""Shared utility functions for CLI commands."""

import click

from ..core.settings import Settings
from ..services import MCPService


def get_settings(ctx: click.Context) -> Settings:
    """Settings from the root group, or from the environment when run standalone."""
    settings = ctx.find_object(Settings)
    return settings if settings is not None else Settings.from_env()


def get_mcp_service(ctx: click.Context) -> MCPService:
    """Build an MCP service on the configured Gemini config file."""
    return MCPService(get_settings(ctx).config_path)


def describe_target(server) -> str:
    """One-line command or URL summary for a server."""
    if server.command:
        parts = [server.command] + list(server.args or [])
        return ' '.join(parts)
    return server.url or ''
