"""Show MCP server command."""

import asyncio

import click
from rich.console import Console

from ....services import MCPServiceError
from ...util import get_mcp_service


@click.command()
@click.argument('name')
@click.option('--project', 'project_path', help='Look in this project path before global')
@click.pass_context
def show_server(ctx, name: str, project_path):
    """Show one MCP server as JSON."""
    console = Console()

    try:
        service = get_mcp_service(ctx)
        server = asyncio.run(service.get_server(name, project_path))
    except MCPServiceError as e:
        console.print(f"[red]Error loading MCP servers: {e}[/red]")
        ctx.exit(1)

    if server is None:
        console.print(f"[yellow]MCP server '{name}' not found[/yellow]")
        ctx.exit(1)

    click.echo(server.model_dump_json(indent=2, exclude_none=True))
