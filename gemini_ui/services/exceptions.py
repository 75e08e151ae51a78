"""Custom exceptions for service layer."""

from pathlib import Path
from typing import List, Optional


class ServiceError(Exception):
    """Base exception for all service-related errors."""

    pass


class MCPServiceError(ServiceError):
    """Exception raised for MCP server management operations."""

    pass


class ConfigParseError(MCPServiceError):
    """Exception raised when the shared config file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid MCP config file {path}: {reason}")


class ServerValidationError(MCPServiceError):
    """Exception raised when a submitted server definition is malformed."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class ServerNotFoundError(MCPServiceError):
    """Exception raised when no server is configured under a name."""

    def __init__(self, name: str, project_path: Optional[str] = None):
        self.name = name
        self.project_path = project_path
        super().__init__(f"Server '{name}' not found")


class ServerDisabledError(MCPServiceError):
    """Exception raised when starting a server whose definition is disabled."""

    pass


class ProcessStartError(MCPServiceError):
    """Exception raised when the supervisor refuses to start a server."""

    pass


class UnsupportedTransportError(ProcessStartError):
    """Exception raised when starting a server that is not stdio."""

    pass


class MissingCommandError(ProcessStartError):
    """Exception raised when a stdio server has no command."""

    pass


class AlreadyRunningError(ProcessStartError):
    """Exception raised when a server is already running under the name."""

    pass
