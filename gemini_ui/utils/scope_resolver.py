"""Flatten the global and project sections into resolved server views."""

from typing import Callable, List, Optional

from ..models.mcp import (
    MCPConfigDocument,
    MCPScope,
    ProcessState,
    ProcessStatus,
    ResolvedServer,
)

StatusLookup = Callable[[str], ProcessStatus]


def _always_stopped(name: str) -> ProcessStatus:
    return ProcessStatus(state=ProcessState.STOPPED)


def resolve_servers(
    document: MCPConfigDocument,
    project_path: Optional[str] = None,
    status_of: StatusLookup = _always_stopped,
) -> List[ResolvedServer]:
    """List global servers, then the servers of ``project_path`` if it has a section.

    A name present in both scopes appears twice, once per scope.
    """
    servers = [
        ResolvedServer.from_config(name, config, MCPScope.GLOBAL, status_of(name))
        for name, config in document.mcpServers.items()
    ]

    if project_path is not None:
        project_servers = document.section(project_path) or {}
        servers.extend(
            ResolvedServer.from_config(name, config, MCPScope.PROJECT, status_of(name))
            for name, config in project_servers.items()
        )

    return servers


def resolve_server(
    document: MCPConfigDocument,
    name: str,
    project_path: Optional[str] = None,
    status_of: StatusLookup = _always_stopped,
) -> Optional[ResolvedServer]:
    """Find one server by name, or None.

    With ``project_path`` the project section wins over global; without it
    only the global section is searched.
    """
    if project_path is not None:
        project_servers = document.section(project_path) or {}
        if name in project_servers:
            return ResolvedServer.from_config(
                name, project_servers[name], MCPScope.PROJECT, status_of(name)
            )

    config = document.mcpServers.get(name)
    if config is None:
        return None
    return ResolvedServer.from_config(name, config, MCPScope.GLOBAL, status_of(name))
