"""List MCP servers command."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from ....services import MCPServiceError
from ...util import describe_target, get_mcp_service


@click.command()
@click.option('--project', 'project_path', help='Also list servers of this project path')
@click.pass_context
def list_servers(ctx, project_path):
    """List configured MCP servers."""
    console = Console()

    try:
        service = get_mcp_service(ctx)
        servers = asyncio.run(service.list_servers(project_path))
    except MCPServiceError as e:
        console.print(f"[red]Error loading MCP servers: {e}[/red]")
        ctx.exit(1)

    if not servers:
        console.print("[yellow]No MCP servers configured.[/yellow]")
        console.print("Use 'gemini-ui mcp add' to add servers.")
        return

    table = Table(title="MCP Servers")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Scope", style="magenta")
    table.add_column("Transport", style="green")
    table.add_column("Command / URL", style="white")
    table.add_column("Enabled")
    table.add_column("Status")

    for server in servers:
        transport = server.transport.value if server.transport else "?"
        enabled = "yes" if server.enabled else "[dim]no[/dim]"
        table.add_row(
            server.name,
            server.scope.value,
            transport,
            describe_target(server),
            enabled,
            server.status.value,
        )

    console.print(table)
