"""Search indexing tools for MCP.

Registers media assets with the Smart Search AI backend so they can be
found through natural-language queries.
"""

from __future__ import annotations

from typing import Any, Union

import structlog
from pydantic import Field, field_validator, model_validator

from ...search import (
    IndexableAsset,
    SearchBackendError,
    SearchConfigurationError,
    SmartSearchClient,
)
from ..registry import MCPServerRegistry
from ..types import MCPToolResult, MCPToolSpec, ToolInputError, create_tool_input_schema
from ._arguments import ToolArguments, coerce_text_or_empty

logger = structlog.get_logger(__name__)

INDEX_ACTION = "index-cloudinary-asset"
BULK_INDEX_ACTION = "bulk-index-cloudinary-assets"

_ASSET_PROPERTIES: dict[str, Any] = {
    "public_id": {"type": "string", "description": "Cloudinary public_id (unique identifier)"},
    "secure_url": {"type": "string", "description": "Cloudinary secure URL"},
    "resource_type": {"type": "string", "description": "Resource type: image, video, raw"},
    "format": {"type": "string", "description": "File format: jpg, png, mp4, etc."},
    "tags": {
        "type": "array",
        "description": "Array of tags for searchability (optional)",
        "items": {"type": "string"},
    },
}


def _coerce_tags(value: Any) -> Union[list[str], str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [coerce_text_or_empty(tag) for tag in value]
    return coerce_text_or_empty(value)


def _asset_from_entry(entry: Any) -> IndexableAsset | None:
    """Build an asset from one bulk entry; None when it cannot be indexed."""
    if not isinstance(entry, dict):
        return None
    try:
        public_id = coerce_text_or_empty(entry.get("public_id"))
        source_url = coerce_text_or_empty(entry.get("secure_url"))
        resource_type = coerce_text_or_empty(entry.get("resource_type"))
        file_format = coerce_text_or_empty(entry.get("format"))
        tags = _coerce_tags(entry.get("tags"))
    except ValueError:
        return None
    if not public_id or not source_url:
        return None
    return IndexableAsset(
        public_id=public_id,
        source_url=source_url,
        resource_type=resource_type,
        format=file_format,
        tags=tags,
    )


class IndexAssetArguments(ToolArguments):
    public_id: str = ""
    secure_url: str = ""
    resource_type: str = ""
    format: str = ""
    tags: Union[list[str], str] = Field(default_factory=list)

    @field_validator("public_id", "secure_url", "resource_type", "format", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return coerce_text_or_empty(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> Union[list[str], str]:
        return _coerce_tags(value)

    @model_validator(mode="after")
    def _require_fields(self) -> "IndexAssetArguments":
        if not (self.public_id and self.secure_url and self.resource_type and self.format):
            raise ToolInputError("public_id, secure_url, resource_type, and format are required")
        return self

    def to_asset(self) -> IndexableAsset:
        return IndexableAsset(
            public_id=self.public_id,
            source_url=self.secure_url,
            resource_type=self.resource_type,
            format=self.format,
            tags=self.tags,
        )


class BulkIndexArguments(ToolArguments):
    assets: list[Any] = Field(default_factory=list, validate_default=True)

    @field_validator("assets", mode="before")
    @classmethod
    def _require_assets(cls, value: Any) -> list[Any]:
        if not value or not isinstance(value, list):
            raise ToolInputError("assets array is required")
        return value

    def valid_assets(self) -> list[IndexableAsset]:
        """Entries missing a public id or URL are skipped."""
        assets = []
        for entry in self.assets:
            asset = _asset_from_entry(entry)
            if asset is not None:
                assets.append(asset)
        return assets


def create_index_asset_tool(
    client: SmartSearchClient,
    site_url: str,
    system_name: str,
    prefix: str,
) -> MCPToolSpec:
    """Create the index-cloudinary-asset tool.

    ``site_url`` is recorded as the document source in the mutation meta.
    """

    async def handler(args: IndexAssetArguments) -> MCPToolResult:
        if not client.configured:
            return MCPToolResult.error(str(SearchConfigurationError()))

        asset = args.to_asset()
        meta = {"system": system_name, "action": INDEX_ACTION, "source": site_url}

        try:
            payload = await client.index_document(asset.to_document(), meta)
        except SearchBackendError as e:
            return MCPToolResult.error(str(e))

        message = payload.get("message") or "Unknown result"
        if not payload.get("success"):
            logger.warning("asset_index_rejected", document_id=asset.document_id, message=message)
            return MCPToolResult.text(f"Indexing failed: {message}")

        text = "Cloudinary asset indexed successfully into Smart Search AI!\n\n"
        text += f"• Document ID: {asset.document_id}\n"
        text += f"• Public ID: {asset.public_id}\n"
        text += f"• Resource Type: {asset.resource_type}\n"
        text += f"• Format: {asset.format}\n"
        text += f"• Status: {message}\n"

        return MCPToolResult.text(text)

    return MCPToolSpec(
        name=f"{prefix}{INDEX_ACTION}",
        description="Index a Cloudinary asset into Smart Search AI for natural language search",
        input_schema=create_tool_input_schema(
            properties=dict(_ASSET_PROPERTIES),
            required=["public_id", "secure_url", "resource_type", "format"],
        ),
        handler=handler,
        arguments_model=IndexAssetArguments,
        invalid_arguments_message="public_id, secure_url, resource_type, and format are required",
        category="search",
    )


def create_bulk_index_tool(
    client: SmartSearchClient,
    site_url: str,
    system_name: str,
    prefix: str,
) -> MCPToolSpec:
    """Create the bulk-index-cloudinary-assets tool."""

    async def handler(args: BulkIndexArguments) -> MCPToolResult:
        if not client.configured:
            return MCPToolResult.error(str(SearchConfigurationError()))

        assets = args.valid_assets()
        if not assets:
            return MCPToolResult.error("No valid assets to index")

        skipped = len(args.assets) - len(assets)
        if skipped:
            logger.info("bulk_index_assets_skipped", skipped=skipped)

        meta = {"system": system_name, "action": BULK_INDEX_ACTION, "source": site_url}

        try:
            payload = await client.bulk_index([asset.to_document() for asset in assets], meta)
        except SearchBackendError as e:
            return MCPToolResult.error(str(e))

        if not payload.get("success"):
            logger.warning("bulk_index_rejected", submitted=len(assets))
            return MCPToolResult.text("Bulk indexing failed")

        documents = payload.get("documents")
        indexed = len(documents) if isinstance(documents, list) else 0

        text = "Bulk indexing successful!\n\n"
        text += f"• Assets Indexed: {indexed}\n"
        text += "• Status: All Cloudinary assets are now searchable via Smart Search AI\n"

        return MCPToolResult.text(text)

    item_properties = {key: {"type": value["type"]} for key, value in _ASSET_PROPERTIES.items()}
    item_properties["tags"]["items"] = {"type": "string"}

    return MCPToolSpec(
        name=f"{prefix}{BULK_INDEX_ACTION}",
        description="Index multiple Cloudinary assets into Smart Search AI in one request",
        input_schema=create_tool_input_schema(
            properties={
                "assets": {
                    "type": "array",
                    "description": "Array of Cloudinary assets to index",
                    "items": {"type": "object", "properties": item_properties},
                },
            },
            required=["assets"],
        ),
        handler=handler,
        arguments_model=BulkIndexArguments,
        invalid_arguments_message="assets array is required",
        category="search",
    )


def register_search_tools(
    registry: MCPServerRegistry,
    client: SmartSearchClient,
    site_url: str,
    system_name: str,
    prefix: str,
) -> None:
    """Register search indexing tools with the registry."""
    registry.register(create_index_asset_tool(client, site_url, system_name, prefix))
    registry.register(create_bulk_index_tool(client, site_url, system_name, prefix))
