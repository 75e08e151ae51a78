"""Run an MCP server in the foreground."""

import asyncio

import click
from rich.console import Console

from ....models.mcp import ProcessState
from ....services import MCPService, MCPServiceError
from ...util import get_mcp_service

POLL_INTERVAL = 0.5


async def _supervise(service: MCPService, name: str, project_path, console: Console):
    """Start ``name`` and wait until it exits; always stops it on the way out."""
    try:
        status = await service.start_server(name, project_path)
        if status.state == ProcessState.STOPPED:
            return status

        console.print(f"[green]MCP server '{name}' running (PID {status.pid})[/green]")
        console.print("Press Ctrl+C to stop.")
        while status.is_running:
            await asyncio.sleep(POLL_INTERVAL)
            status = await service.get_status(name)
        return status
    finally:
        await service.shutdown()


@click.command()
@click.argument('name')
@click.option('--project', 'project_path', help='Look in this project path before global')
@click.pass_context
def run_server(ctx, name: str, project_path):
    """Start an MCP server and keep it running until it exits or Ctrl+C."""
    console = Console()

    try:
        service = get_mcp_service(ctx)
        status = asyncio.run(_supervise(service, name, project_path, console))
    except KeyboardInterrupt:
        console.print(f"\n[yellow]Stopped MCP server '{name}'[/yellow]")
        return
    except MCPServiceError as e:
        console.print(f"[red]Error running MCP server: {e}[/red]")
        ctx.exit(1)

    if status.error:
        console.print(f"[red]MCP server '{name}' failed: {status.error}[/red]")
        ctx.exit(1)

    console.print(f"[yellow]MCP server '{name}' exited[/yellow]")
