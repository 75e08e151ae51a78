"""Models for MCP (Model Context Protocol) configuration."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MCPTransport(str, Enum):
    """How the assistant talks to an MCP server."""

    STDIO = "stdio"
    SSE = "sse"
    HTTP = "http"


class MCPScope(str, Enum):
    """Section of the config document a server was read from."""

    GLOBAL = "global"
    PROJECT = "project"


class ServerStatus(str, Enum):
    """Live status reported alongside a resolved server."""

    RUNNING = "running"
    STOPPED = "stopped"


class ProcessState(str, Enum):
    """Lifecycle state of a supervised server process."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    ERRORED = "errored"


class MCPServerConfig(BaseModel):
    """A server entry as stored in the config document (no name, no scope).

    Keys this model does not know about are kept so entries written by the
    Gemini CLI survive a rewrite. ``enabled`` defaults to True on read but is
    only written back when it was present.
    """

    model_config = ConfigDict(extra="allow")

    transport: Optional[MCPTransport] = Field(None, description="Server transport")
    command: Optional[str] = Field(None, description="Executable for stdio servers")
    args: Optional[List[str]] = Field(None, description="Arguments for the stdio command")
    url: Optional[str] = Field(None, description="Endpoint for sse/http servers")
    env: Optional[Dict[str, str]] = Field(None, description="Extra environment variables")
    enabled: bool = Field(True, description="Disabled servers are never started")

    @property
    def effective_transport(self) -> Optional[MCPTransport]:
        """Declared transport, or the one implied by command/url."""
        if self.transport is not None:
            return self.transport
        if self.command:
            return MCPTransport.STDIO
        if self.url:
            return MCPTransport.HTTP
        return None

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize to the on-disk shape, keeping unknown keys."""
        data = self.model_dump(mode="json", exclude_unset=True)
        data.update(self.model_extra or {})
        return data


class MCPServer(BaseModel):
    """A complete server definition submitted for add/update."""

    name: str
    transport: MCPTransport
    command: Optional[str] = None
    args: Optional[List[str]] = None
    url: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    enabled: bool = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value

    @model_validator(mode="after")
    def _check_transport_fields(self) -> "MCPServer":
        if self.transport == MCPTransport.STDIO:
            if not self.command:
                raise ValueError("Command is required for stdio transport")
            if self.url:
                raise ValueError("URL is not allowed for stdio transport")
        else:
            if not self.url:
                raise ValueError("URL is required for SSE/HTTP transport")
            if self.command:
                raise ValueError("Command is not allowed for SSE/HTTP transport")
        return self

    def to_config(self) -> MCPServerConfig:
        """Strip the name, leaving the entry to store under it."""
        values = self.model_dump(exclude={"name"}, exclude_none=True)
        return MCPServerConfig(**values)


class ProjectSection(BaseModel):
    """Per-project block under ``geminiProjects``."""

    model_config = ConfigDict(extra="allow")

    mcpServers: Dict[str, MCPServerConfig] = Field(default_factory=dict)

    def to_json_dict(self) -> Dict[str, Any]:
        data = dict(self.model_extra or {})
        if "mcpServers" in self.model_fields_set or self.mcpServers:
            data["mcpServers"] = {
                name: config.to_json_dict() for name, config in self.mcpServers.items()
            }
        return data


class MCPConfigDocument(BaseModel):
    """The shared ``~/.gemini.json`` document.

    Only the MCP sections are modelled; every other top-level key belongs to
    the Gemini CLI and is carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    mcpServers: Dict[str, MCPServerConfig] = Field(
        default_factory=dict, description="Global servers by name"
    )
    geminiProjects: Dict[str, ProjectSection] = Field(
        default_factory=dict, description="Project sections by absolute path"
    )

    def section(self, project_path: Optional[str] = None) -> Optional[Dict[str, MCPServerConfig]]:
        """Servers of the global section, or of a project section if it exists."""
        if project_path is None:
            return self.mcpServers
        project = self.geminiProjects.get(project_path)
        return project.mcpServers if project is not None else None

    def ensure_section(self, project_path: Optional[str] = None) -> Dict[str, MCPServerConfig]:
        """Like :meth:`section`, creating the project section when missing."""
        if project_path is None:
            return self.mcpServers
        if project_path not in self.geminiProjects:
            self.geminiProjects[project_path] = ProjectSection()
        return self.geminiProjects[project_path].mcpServers

    def to_json_dict(self) -> Dict[str, Any]:
        """Build the full document for writing."""
        data = dict(self.model_extra or {})
        if "mcpServers" in self.model_fields_set or self.mcpServers:
            data["mcpServers"] = {
                name: config.to_json_dict() for name, config in self.mcpServers.items()
            }
        if "geminiProjects" in self.model_fields_set or self.geminiProjects:
            data["geminiProjects"] = {
                path: project.to_json_dict() for path, project in self.geminiProjects.items()
            }
        return data


class ProcessStatus(BaseModel):
    """Point-in-time status of a named server process."""

    state: ProcessState
    pid: Optional[int] = None
    uptime: Optional[float] = Field(None, description="Seconds since start")
    error: Optional[str] = Field(None, description="Last failure since the last start")

    @property
    def is_running(self) -> bool:
        return self.state in (ProcessState.STARTING, ProcessState.RUNNING)


class ResolvedServer(BaseModel):
    """A server definition with its name, scope and live status."""

    name: str
    scope: MCPScope
    transport: Optional[MCPTransport] = None
    command: Optional[str] = None
    args: Optional[List[str]] = None
    url: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    enabled: bool = True
    status: ServerStatus = ServerStatus.STOPPED
    pid: Optional[int] = None

    @classmethod
    def from_config(
        cls, name: str, config: MCPServerConfig, scope: MCPScope, process: ProcessStatus
    ) -> "ResolvedServer":
        running = process.is_running
        return cls(
            name=name,
            scope=scope,
            transport=config.effective_transport,
            command=config.command,
            args=config.args,
            url=config.url,
            env=config.env,
            enabled=config.enabled,
            status=ServerStatus.RUNNING if running else ServerStatus.STOPPED,
            pid=process.pid if running else None,
        )

