"""Models for Gemini UI."""

from .mcp import (
    MCPConfigDocument,
    MCPScope,
    MCPServer,
    MCPServerConfig,
    MCPTransport,
    ProcessState,
    ProcessStatus,
    ProjectSection,
    ResolvedServer,
    ServerStatus,
)

__all__ = [
    'MCPConfigDocument',
    'MCPScope',
    'MCPServer',
    'MCPServerConfig',
    'MCPTransport',
    'ProcessState',
    'ProcessStatus',
    'ProjectSection',
    'ResolvedServer',
    'ServerStatus'
]
