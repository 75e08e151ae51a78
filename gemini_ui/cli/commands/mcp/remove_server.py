"""Remove MCP server command."""

import asyncio

import click
from rich.console import Console
from rich.prompt import Confirm

from ....services import MCPServiceError
from ...util import get_mcp_service


@click.command()
@click.argument('name')
@click.option('--project', 'project_path', help='Remove from this project path instead of global')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@click.pass_context
def remove_server(ctx, name: str, project_path, yes: bool):
    """Remove an MCP server configuration.

    With --project the server is removed from that project's section if the
    project has one; global servers are not touched in that case.
    """
    console = Console()

    try:
        service = get_mcp_service(ctx)

        # Check the section remove would actually delete from
        scope = asyncio.run(service.removal_scope(name, project_path))
        if scope is None:
            where = f" in project {project_path}" if project_path else ""
            console.print(f"[yellow]MCP server '{name}' not found{where}[/yellow]")
            return

        # Confirm removal
        if not yes:
            if not Confirm.ask(f"Remove MCP server '{name}' ({scope.value})?"):
                console.print("[yellow]Cancelled[/yellow]")
                return

        if asyncio.run(service.remove_server(name, project_path)):
            console.print(f"[green]Removed MCP server '{name}' ({scope.value})[/green]")
        else:
            console.print(f"[red]Failed to remove MCP server '{name}'[/red]")
            ctx.exit(1)

    except MCPServiceError as e:
        console.print(f"[red]Error removing MCP server: {e}[/red]")
        ctx.exit(1)
