"""Site status tools for MCP.

Provides the site information and cache purge tools.
"""

from __future__ import annotations

from typing import Any

import structlog

from ...content import ContentBackend
from ..registry import MCPServerRegistry
from ..types import MCPToolResult, MCPToolSpec, create_tool_input_schema

logger = structlog.get_logger(__name__)


def create_site_info_tool(backend: ContentBackend, prefix: str) -> MCPToolSpec:
    """Create the get-current-site-info tool."""

    async def handler(arguments: dict[str, Any]) -> MCPToolResult:
        site = await backend.get_site_info()
        return MCPToolResult.text(
            f"Site: {site.name}\n"
            f"URL: {site.url}\n"
            f"Description: {site.description}\n"
            f"WordPress Version: {site.version}\n"
            f"Admin Email: {site.admin_email}"
        )

    return MCPToolSpec(
        name=f"{prefix}get-current-site-info",
        description="Get information about the current WordPress site",
        input_schema=create_tool_input_schema(),
        handler=handler,
        category="site",
    )


def create_purge_cache_tool(backend: ContentBackend, prefix: str) -> MCPToolSpec:
    """Create the purge-cache tool.

    A host without a cache layer still reports success.
    """

    async def handler(arguments: dict[str, Any]) -> MCPToolResult:
        flushed = await backend.flush_cache()
        site = await backend.get_site_info()
        logger.info("site_cache_purged", flushed=flushed)
        return MCPToolResult.text(f"Cache purged successfully for {site.name}")

    return MCPToolSpec(
        name=f"{prefix}purge-cache",
        description="Clear the local WordPress cache",
        input_schema=create_tool_input_schema(),
        handler=handler,
        category="site",
    )


def register_site_tools(
    registry: MCPServerRegistry,
    backend: ContentBackend,
    prefix: str,
) -> None:
    """Register site status tools with the registry."""
    registry.register(create_site_info_tool(backend, prefix))
    registry.register(create_purge_cache_tool(backend, prefix))
