"""MCP command group."""

import click

from .list_servers import list_servers
from .show_server import show_server
from .add_server import add_server
from .remove_server import remove_server
from .show_config import show_config
from .run_server import run_server


@click.group()
def mcp():
    """Manage MCP (Model Context Protocol) servers."""
    pass


# Add subcommands
mcp.add_command(list_servers, name='list')
mcp.add_command(show_server, name='show')
mcp.add_command(add_server, name='add')
mcp.add_command(remove_server, name='remove')
mcp.add_command(show_config, name='config')
mcp.add_command(run_server, name='run')
