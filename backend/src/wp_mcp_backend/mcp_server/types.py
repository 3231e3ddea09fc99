"""MCP Server type definitions.

Defines the core types for Model Context Protocol (MCP) server operations:
tool definitions, tool results, and the JSON-RPC 2.0 request/response
envelope used by the WordPress MCP endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# MCP Protocol version
MCP_PROTOCOL_VERSION = "2024-11-05"

DEFAULT_REQUEST_ID = 1


class MCPErrorCode(IntEnum):
    """JSON-RPC error codes surfaced by the dispatcher."""

    METHOD_NOT_FOUND = -32601


class MCPError(Exception):
    """Protocol-level error carried in the JSON-RPC ``error`` member."""

    def __init__(self, code: MCPErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-RPC error object format."""
        return {
            "code": int(self.code),
            "message": self.message,
        }


class ToolInputError(ValueError):
    """Raised by tool argument models when required input is missing."""


@dataclass
class MCPToolResult:
    """Result from executing an MCP tool.

    Every tool outcome, including input and backend failures, is a text
    result. Failures are only distinguishable by their text.
    """

    content: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool result format."""
        return {"content": self.content}

    @property
    def text_content(self) -> str:
        """Text of the first content block."""
        if not self.content:
            return ""
        return str(self.content[0].get("text", ""))

    @classmethod
    def text(cls, text: str) -> MCPToolResult:
        """Create a text result."""
        return cls(content=[{"type": "text", "text": text}])

    @classmethod
    def error(cls, message: str) -> MCPToolResult:
        """Create an ``Error: ...`` text result."""
        return cls.text(f"Error: {message}")


ToolHandler = Callable[[Any], Awaitable[MCPToolResult]]


@dataclass(frozen=True)
class MCPToolSpec:
    """Specification for an MCP tool.

    ``arguments_model`` normalizes the raw ``arguments`` object before the
    handler runs. When validation fails the caller gets
    ``Error: <invalid_arguments_message>``.
    """

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler
    arguments_model: Optional[type[BaseModel]] = None
    invalid_arguments_message: str = "invalid arguments"
    category: str = "general"

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool listing format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class MCPRequest(BaseModel):
    """MCP JSON-RPC request.

    Missing members are filled with the defaults clients rely on: ``id``
    becomes ``1`` and ``method`` becomes the empty string, which then falls
    through to the unknown-method error.
    """

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    id: Any = Field(default=DEFAULT_REQUEST_ID, description="Request ID")
    method: str = Field(default="", description="Method name")
    params: dict[str, Any] = Field(default_factory=dict, description="Method params")

    @field_validator("jsonrpc", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> str:
        return "2.0" if value is None else str(value)

    @field_validator("id", mode="before")
    @classmethod
    def _default_id(cls, value: Any) -> Any:
        return DEFAULT_REQUEST_ID if value is None else value

    @field_validator("method", mode="before")
    @classmethod
    def _coerce_method(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}


class MCPResponse(BaseModel):
    """MCP JSON-RPC response."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    id: Any = Field(default=DEFAULT_REQUEST_ID, description="Request ID")
    result: Optional[dict[str, Any]] = Field(default=None, description="Result data")
    error: Optional[dict[str, Any]] = Field(default=None, description="Error data")

    @classmethod
    def success(cls, request_id: Any, result: dict[str, Any]) -> MCPResponse:
        """Create a success response."""
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, error: MCPError) -> MCPResponse:
        """Create an error response."""
        return cls(id=request_id, error=error.to_dict())

    def to_dict(self) -> dict[str, Any]:
        """Wire form: exactly one of ``result`` or ``error`` is present."""
        body: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error
        else:
            body["result"] = self.result if self.result is not None else {}
        return body


class MCPCapabilities(BaseModel):
    """MCP server capabilities declaration.

    Only tools are supported; the marker is an empty object.
    """

    tools: dict[str, Any] = Field(default_factory=dict, description="Tools capability")


class MCPServerInfo(BaseModel):
    """MCP server information."""

    name: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")


class MCPInitializeResult(BaseModel):
    """MCP initialize response result."""

    protocolVersion: str = Field(default=MCP_PROTOCOL_VERSION, description="MCP protocol version")
    capabilities: MCPCapabilities = Field(
        default_factory=MCPCapabilities,
        description="Server capabilities",
    )
    serverInfo: MCPServerInfo = Field(..., description="Server information")


# Tool input schema helpers
def create_tool_input_schema(
    properties: Optional[dict[str, dict[str, Any]]] = None,
    required: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Create a JSON Schema describing tool input.

    Args:
        properties: Property definitions
        required: List of required property names

    Returns:
        JSON Schema dict for tool input
    """
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties or {},
    }
    if required:
        schema["required"] = required
    return schema
