"""MCP Server tool registry.

Manages registration, discovery and execution of MCP tools. Every tool
outcome is normalized to an ``MCPToolResult``; nothing raised by a tool
escapes as a protocol error.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from ..core.errors import BackendError
from .types import MCPToolResult, MCPToolSpec, ToolInputError

logger = structlog.get_logger(__name__)

DEFAULT_TOOL_TIMEOUT_SECONDS = 60.0


class MCPServerRegistry:
    """Ordered registry of MCP tools.

    Tools are listed in registration order, which is the order clients
    see in ``tools/list``.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_TOOL_TIMEOUT_SECONDS) -> None:
        """Initialize the registry.

        Args:
            timeout_seconds: Upper bound on a single tool execution
        """
        self._tools: dict[str, MCPToolSpec] = {}
        self._timeout = timeout_seconds

    def register(self, tool: MCPToolSpec) -> None:
        """Register a tool.

        Args:
            tool: Tool specification to register

        Raises:
            ValueError: If tool name already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.info("mcp_tool_registered", name=tool.name, category=tool.category)

    def get_tool(self, name: str) -> Optional[MCPToolSpec]:
        """Get a tool by name."""
        return self._tools.get(name)

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> list[dict[str, Any]]:
        """List available tools in MCP format, in declaration order."""
        return [tool.to_dict() for tool in self._tools.values()]

    def _parse_arguments(self, tool: MCPToolSpec, arguments: dict[str, Any]) -> Any:
        if tool.arguments_model is None:
            return arguments
        return tool.arguments_model.model_validate(arguments)

    async def call_tool(self, name: str, arguments: Any) -> MCPToolResult:
        """Execute a tool.

        Args:
            name: Tool name (exact match)
            arguments: Raw tool arguments; non-objects are treated as empty

        Returns:
            MCPToolResult, including for unknown tools and failures
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.info("mcp_unknown_tool", tool=name)
            return MCPToolResult.text(f"Unknown tool: {name}")

        if not isinstance(arguments, dict):
            arguments = {}

        try:
            parsed = self._parse_arguments(tool, arguments)
        except (ToolInputError, ValidationError) as e:
            logger.info("mcp_tool_invalid_arguments", tool=name, error=str(e))
            return MCPToolResult.error(tool.invalid_arguments_message)

        start_time = time.perf_counter()
        logger.info("mcp_tool_call_started", tool=name, timeout_seconds=self._timeout)

        try:
            result = await asyncio.wait_for(tool.handler(parsed), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "mcp_tool_call_timeout",
                tool=name,
                timeout_seconds=self._timeout,
                elapsed_ms=int((time.perf_counter() - start_time) * 1000),
            )
            return MCPToolResult.error(
                f"Tool execution timed out after {self._timeout:g} seconds"
            )
        except BackendError as e:
            logger.warning(
                "mcp_tool_call_failed",
                tool=name,
                error=str(e),
                elapsed_ms=int((time.perf_counter() - start_time) * 1000),
            )
            return MCPToolResult.error(str(e))
        except Exception as e:
            logger.exception("mcp_tool_call_failed", tool=name, error=str(e))
            return MCPToolResult.error(f"Tool execution failed: {e}")

        logger.info(
            "mcp_tool_call_completed",
            tool=name,
            elapsed_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return result

    def get_tools_by_category(self) -> dict[str, list[str]]:
        """Get tool names grouped by category.

        Returns:
            Dict of category -> list of tool names
        """
        result: dict[str, list[str]] = {}
        for tool in self._tools.values():
            result.setdefault(tool.category, []).append(tool.name)
        return result
