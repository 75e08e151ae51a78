"""Add MCP server command."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console

from ....models.mcp import MCPScope
from ....services import MCPServiceError
from ...util import get_mcp_service


@click.command()
@click.argument('name')
@click.argument('config')
@click.option('--project', 'project_path', help='Store under this project path instead of global')
@click.pass_context
def add_server(ctx, name: str, config: str, project_path):
    """Add or update an MCP server configuration.
    
    NAME: Server name (e.g., 'filesystem', 'github')
    CONFIG: JSON configuration string or @file.json
    
    Examples:
        # Add stdio server
        gemini-ui mcp add fs '{"transport": "stdio", "command": "npx", "args": ["-y", "@modelcontextprotocol/server-filesystem"]}'
        
        # Add http server for one project
        gemini-ui mcp add docs '{"transport": "http", "url": "https://mcp.example.com"}' --project /src/app
        
        # Load from file
        gemini-ui mcp add myserver @server-config.json
    """
    console = Console()

    # Parse configuration
    if config.startswith('@'):
        config_file = Path(config[1:])
        if not config_file.exists():
            console.print(f"[red]Configuration file not found: {config_file}[/red]")
            ctx.exit(1)
        config = config_file.read_text()

    try:
        config_data = json.loads(config)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON configuration: {e}[/red]")
        ctx.exit(1)

    if not isinstance(config_data, dict):
        console.print("[red]Configuration must be a JSON object[/red]")
        ctx.exit(1)

    config_data['name'] = name
    target_scope = MCPScope.PROJECT if project_path else MCPScope.GLOBAL

    try:
        service = get_mcp_service(ctx)
        existing = asyncio.run(service.get_server(name, project_path))
        server = asyncio.run(service.upsert_server(config_data, project_path))
    except MCPServiceError as e:
        console.print(f"[red]Error adding MCP server: {e}[/red]")
        ctx.exit(1)

    if existing is not None and existing.scope == target_scope:
        console.print(f"[green]Updated MCP server '{name}' ({target_scope.value})[/green]")
    else:
        console.print(f"[green]Added MCP server '{name}' ({target_scope.value})[/green]")

    # Show stored configuration
    console.print(f"\nConfiguration: {json.dumps(server.model_dump(mode='json', exclude_none=True), indent=2)}")
