"""Service layer for MCP server management."""

from .exceptions import (
    ServiceError,
    MCPServiceError,
    ConfigParseError,
    ServerValidationError,
    ServerNotFoundError,
    ServerDisabledError,
    ProcessStartError,
    UnsupportedTransportError,
    MissingCommandError,
    AlreadyRunningError,
)
from .config_store import ConfigStore
from .process_supervisor import ProcessSupervisor, RunningProcess
from .mcp_service import MCPService, validate_server

__all__ = [
    "ConfigStore",
    "ProcessSupervisor",
    "RunningProcess",
    "MCPService",
    "validate_server",
    "ServiceError",
    "MCPServiceError",
    "ConfigParseError",
    "ServerValidationError",
    "ServerNotFoundError",
    "ServerDisabledError",
    "ProcessStartError",
    "UnsupportedTransportError",
    "MissingCommandError",
    "AlreadyRunningError",
]
