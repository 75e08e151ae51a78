"""Show the raw Gemini config command."""

import asyncio
import json

import click
from rich.console import Console

from ....services import MCPServiceError
from ...util import get_mcp_service


@click.command()
@click.pass_context
def show_config(ctx):
    """Print the whole shared Gemini config file."""
    console = Console()

    try:
        service = get_mcp_service(ctx)
        config = asyncio.run(service.get_config())
    except MCPServiceError as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        ctx.exit(1)

    click.echo(json.dumps(config, indent=2))
