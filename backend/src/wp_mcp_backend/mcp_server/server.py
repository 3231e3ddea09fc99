"""MCP Server implementation.

Parses the JSON-RPC envelope, routes by ``method`` and, for
``tools/call``, by tool name through the registry. Unknown methods are
JSON-RPC errors; unknown tools are ordinary tool results.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional

import structlog

from .registry import MCPServerRegistry
from .types import (
    MCP_PROTOCOL_VERSION,
    MCPCapabilities,
    MCPError,
    MCPErrorCode,
    MCPInitializeResult,
    MCPRequest,
    MCPResponse,
    MCPServerInfo,
)

logger = structlog.get_logger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} is out of range")
    return value


class MCPServer:
    """JSON-RPC dispatcher for the MCP tool catalog."""

    def __init__(
        self,
        name: str = "WP Engine MCP Server",
        version: str = "2.0.0",
        registry: Optional[MCPServerRegistry] = None,
    ) -> None:
        """Initialize MCP server.

        Args:
            name: Server name reported in ``serverInfo``
            version: Server version reported in ``serverInfo``
            registry: Tool registry (creates an empty one if not provided)
        """
        self.name = name
        self.version = version
        self._registry = registry or MCPServerRegistry()

    @property
    def registry(self) -> MCPServerRegistry:
        """Get the tool registry."""
        return self._registry

    def get_capabilities(self) -> MCPCapabilities:
        """Get server capabilities."""
        return MCPCapabilities(tools={})

    def get_server_info(self) -> MCPServerInfo:
        """Get server info."""
        return MCPServerInfo(name=self.name, version=self.version)

    @staticmethod
    def parse_body(raw_body: bytes | str) -> MCPRequest:
        """Decode a raw request body into an ``MCPRequest``.

        Bodies that are not a JSON object, including ones using the
        non-standard NaN and Infinity literals, are treated as an empty object.
        """
        try:
            if isinstance(raw_body, bytes):
                raw_body = raw_body.decode("utf-8")
            data = (
                json.loads(
                    raw_body, parse_constant=_reject_constant, parse_float=_finite_float
                )
                if raw_body.strip()
                else {}
            )
        except ValueError as e:
            logger.info("mcp_request_unparseable", error=str(e))
            data = {}
        if not isinstance(data, dict):
            data = {}
        return MCPRequest.model_validate(data)

    async def dispatch(self, raw_body: bytes | str) -> MCPResponse:
        """Handle one raw JSON-RPC request body."""
        return await self.handle_request(self.parse_body(raw_body))

    async def handle_request(self, request: MCPRequest) -> MCPResponse:
        """Handle an MCP request.

        Args:
            request: The MCP request

        Returns:
            MCP response echoing the request id
        """
        method = request.method
        params = request.params

        logger.debug("mcp_request_received", method=method, request_id=request.id)

        if method == "initialize":
            result = self._handle_initialize(params)
        elif method == "tools/list":
            result = self._handle_tools_list()
        elif method == "tools/call":
            result = await self._handle_tools_call(params)
        else:
            logger.info("mcp_method_not_found", method=method, request_id=request.id)
            return MCPResponse.failure(
                request.id,
                MCPError(
                    code=MCPErrorCode.METHOD_NOT_FOUND,
                    message=f"Method not found: {method}",
                ),
            )

        return MCPResponse.success(request.id, result)

    def _handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle initialize request. Client params do not affect the result."""
        client_info = params.get("clientInfo")
        if isinstance(client_info, dict):
            logger.info(
                "mcp_initialize",
                client_name=client_info.get("name"),
                client_version=client_info.get("version"),
            )

        result = MCPInitializeResult(
            protocolVersion=MCP_PROTOCOL_VERSION,
            capabilities=self.get_capabilities(),
            serverInfo=self.get_server_info(),
        )
        return result.model_dump()

    def _handle_tools_list(self) -> dict[str, Any]:
        """Handle tools/list request."""
        return {"tools": self._registry.list_tools()}

    async def _handle_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle tools/call request."""
        name = params.get("name")
        if name is None:
            name = ""
        elif not isinstance(name, str):
            name = str(name)

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        result = await self._registry.call_tool(name=name, arguments=arguments)
        return result.to_dict()
