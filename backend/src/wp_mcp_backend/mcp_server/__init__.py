"""MCP Server for WordPress content and Smart Search AI indexing.

This module provides a Model Context Protocol (MCP) server that exposes
post management and media indexing as tools for LLM clients.
"""

from .auth import MCPAuthenticator, MCPAuthError, MCPTokenAuth, generate_access_token
from .registry import MCPServerRegistry
from .server import MCPServer
from .types import (
    MCPCapabilities,
    MCPError,
    MCPErrorCode,
    MCPRequest,
    MCPResponse,
    MCPToolResult,
    MCPToolSpec,
)

__all__ = [
    # Types
    "MCPToolSpec",
    "MCPToolResult",
    "MCPError",
    "MCPErrorCode",
    "MCPRequest",
    "MCPResponse",
    "MCPCapabilities",
    # Registry
    "MCPServerRegistry",
    # Server
    "MCPServer",
    # Auth
    "MCPAuthenticator",
    "MCPAuthError",
    "MCPTokenAuth",
    "generate_access_token",
]
