"""MCP service: server directory over the shared config and the process supervisor."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..models.mcp import (
    MCPConfigDocument,
    MCPScope,
    MCPServer,
    MCPServerConfig,
    ProcessStatus,
    ResolvedServer,
)
from ..utils.scope_resolver import resolve_server, resolve_servers
from .config_store import ConfigStore
from .process_supervisor import ProcessSupervisor
from .exceptions import ServerDisabledError, ServerNotFoundError, ServerValidationError

logger = logging.getLogger(__name__)

ServerDefinition = Union[MCPServer, Mapping[str, Any]]


def validate_server(definition: ServerDefinition) -> MCPServer:
    """Validate a submitted definition before it gets anywhere near the file.

    Raises:
        ServerValidationError: If name/transport are missing or the
            transport-specific fields do not match
    """
    if isinstance(definition, MCPServer):
        return definition
    try:
        return MCPServer.model_validate(dict(definition))
    except ValidationError as e:
        errors = []
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            message = error["msg"].removeprefix("Value error, ")
            errors.append(f"{location}: {message}" if location else message)
        raise ServerValidationError(errors) from e


class MCPService:
    """Service for listing, editing, starting and stopping MCP servers.

    Every operation reloads the config file; nothing read from it is kept
    between calls. File access runs in a worker thread so a slow disk does
    not stall other requests on the event loop. Edits made through one
    service are serialised so each load -> change -> save completes before
    the next begins; edits by other processes are last-writer-wins.

    Config edits never start or stop processes, with one exception:
    removing a server stops it first.
    """

    def __init__(self, config_file: Path, supervisor: Optional[ProcessSupervisor] = None):
        """Initialize MCP service.

        Args:
            config_file: Path to the shared Gemini config file
            supervisor: Process supervisor (a private one is created if omitted)
        """
        self.store = ConfigStore(config_file)
        self.supervisor = supervisor or ProcessSupervisor()
        self._edit_lock = asyncio.Lock()

    async def list_servers(self, project_path: Optional[str] = None) -> List[ResolvedServer]:
        """List global servers plus those of ``project_path``."""
        document = await self._load()
        return resolve_servers(document, project_path, self.supervisor.status)

    async def get_server(
        self, name: str, project_path: Optional[str] = None
    ) -> Optional[ResolvedServer]:
        """Look up one server, project scope first. Returns None if absent."""
        document = await self._load()
        return resolve_server(document, name, project_path, self.supervisor.status)

    async def upsert_server(
        self, definition: ServerDefinition, project_path: Optional[str] = None
    ) -> ResolvedServer:
        """Add or overwrite a server in the global or project section.

        Raises:
            ServerValidationError: If the definition is malformed
        """
        server = validate_server(definition)
        async with self._edit_lock:
            return await self._write(server.name, server.to_config(), project_path)

    async def update_server(
        self, name: str, updates: Mapping[str, Any], project_path: Optional[str] = None
    ) -> ResolvedServer:
        """Merge ``updates`` over an existing server and write it back.

        The entry is written to the scope it was found in. Renaming is not
        possible: ``name`` always wins over a name in ``updates``. Keys the
        model does not know (``cwd``, ``timeout``...) are kept, and may be
        changed through ``updates`` like any other key.

        Raises:
            ServerNotFoundError: If no server is configured under ``name``
            ServerValidationError: If the merged definition is malformed
        """
        known = set(MCPServer.model_fields)
        async with self._edit_lock:
            document = await self._load()
            found_in = project_path
            section = document.section(project_path) if project_path is not None else None
            if section is None or name not in section:
                found_in = None
                section = document.mcpServers
            if name not in section:
                raise ServerNotFoundError(name, project_path)

            existing = section[name]
            merged: Dict[str, Any] = existing.model_dump(
                include=set(MCPServerConfig.model_fields), exclude_unset=True
            )
            merged["transport"] = existing.effective_transport
            merged.update({k: v for k, v in updates.items() if k in known})
            merged["name"] = name

            server = validate_server(merged)
            config = server.to_config()

            extra = dict(existing.model_extra or {})
            extra.update({k: v for k, v in updates.items() if k not in known})
            if extra:
                config = MCPServerConfig(**extra, **config.model_dump(exclude_unset=True))
            return await self._write(name, config, found_in)

    async def removal_scope(
        self, name: str, project_path: Optional[str] = None
    ) -> Optional[MCPScope]:
        """Scope :meth:`remove_server` would delete ``name`` from, or None if it would not find it."""
        document = await self._load()
        section = self._removal_section(document, project_path)
        if name not in section:
            return None
        return MCPScope.GLOBAL if section is document.mcpServers else MCPScope.PROJECT

    async def remove_server(self, name: str, project_path: Optional[str] = None) -> bool:
        """Stop ``name`` if it is running, then delete it from the config.

        Deletes from the project section when ``project_path`` is given and
        that section exists, otherwise from global. Returns True if an entry
        was deleted; a missing entry is not an error.
        """
        self.supervisor.stop(name)

        async with self._edit_lock:
            document = await self._load()
            section = self._removal_section(document, project_path)
            if name not in section:
                return False

            del section[name]
            await asyncio.to_thread(self.store.save, document)

        logger.info(f"Removed MCP server '{name}'")
        return True

    async def start_server(self, name: str, project_path: Optional[str] = None) -> ProcessStatus:
        """Start the stdio server configured under ``name``.

        Raises:
            ServerNotFoundError: If no server is configured under ``name``
            ServerDisabledError: If the server is disabled
            UnsupportedTransportError: If the server is not stdio
            MissingCommandError: If the server has no command
            AlreadyRunningError: If the server is already running
        """
        document = await self._load()
        server = resolve_server(document, name, project_path, self.supervisor.status)
        if server is None:
            raise ServerNotFoundError(name, project_path)
        if not server.enabled:
            raise ServerDisabledError(f"Server '{name}' is disabled")

        if server.scope == MCPScope.PROJECT:
            section = document.section(project_path)
        else:
            section = document.mcpServers
        return await self.supervisor.start(name, section[name])

    async def stop_server(self, name: str) -> None:
        """Stop ``name``. No-op if it is not running."""
        self.supervisor.stop(name)

    async def get_status(self, name: str) -> ProcessStatus:
        """Process status for ``name``."""
        return self.supervisor.status(name)

    async def get_config(self) -> Dict[str, Any]:
        """The whole config document as stored."""
        return await asyncio.to_thread(self.store.load_raw)

    async def shutdown(self) -> None:
        """Stop every process this service started."""
        await self.supervisor.shutdown()

    async def _load(self) -> MCPConfigDocument:
        return await asyncio.to_thread(self.store.load)

    @staticmethod
    def _removal_section(
        document: MCPConfigDocument, project_path: Optional[str]
    ) -> Dict[str, MCPServerConfig]:
        section = document.section(project_path) if project_path is not None else None
        return section if section is not None else document.mcpServers

    async def _write(
        self, name: str, config: MCPServerConfig, project_path: Optional[str]
    ) -> ResolvedServer:
        # Caller holds the edit lock
        document = await self._load()
        document.ensure_section(project_path)[name] = config
        await asyncio.to_thread(self.store.save, document)

        scope = f"project {project_path}" if project_path is not None else "global"
        logger.info(f"Saved MCP server '{name}' ({scope})")
        return resolve_server(document, name, project_path, self.supervisor.status)
