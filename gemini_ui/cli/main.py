"""Main CLI entry point for Gemini UI."""

import logging
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from ..core.constants import LOG_FORMAT
from ..core.settings import Settings
from .commands.mcp import mcp


@click.group()
@click.option('--config', 'config_path', type=click.Path(path_type=Path),
              help='Path to the shared Gemini config file (default: ~/.gemini.json)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    """Gemini UI - manage MCP servers for the Gemini CLI"""
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        console = Console()
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"[red]Invalid setting {field}: {error['msg']}[/red]")
        ctx.exit(1)

    if config_path is not None:
        settings = settings.model_copy(update={'config_path': config_path.expanduser()})

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.logging_level,
        format=LOG_FORMAT,
    )
    ctx.obj = settings


# Register commands
cli.add_command(mcp)


if __name__ == '__main__':
    cli()
