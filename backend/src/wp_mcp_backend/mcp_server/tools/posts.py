"""Post management tools for MCP.

Provides create, update, get and list tools over the content backend.
Input problems and backend failures come back as text results; these
handlers never raise for expected failures.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from pydantic import field_validator, model_validator

from ...content import (
    META_CLOUDINARY_PUBLIC_ID,
    META_CLOUDINARY_URL,
    ContentBackend,
    ContentBackendError,
    PostChanges,
    PostDraft,
    PostNotFoundError,
    PostStatus,
)
from ...content.sanitize import (
    build_image_tag,
    sanitize_post_html,
    sanitize_text_field,
    trim_words,
)
from ..registry import MCPServerRegistry
from ..types import MCPToolResult, MCPToolSpec, ToolInputError, create_tool_input_schema
from ._arguments import ToolArguments, coerce_text, coerce_text_or_empty

logger = structlog.get_logger(__name__)

DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 100
EXCERPT_WORDS = 50


class CreatePostArguments(ToolArguments):
    title: str = ""
    content: str = ""
    status: str = PostStatus.PUBLISH.value
    cloudinary_url: str = ""
    cloudinary_public_id: str = ""

    @field_validator(
        "title", "content", "status", "cloudinary_url", "cloudinary_public_id", mode="before"
    )
    @classmethod
    def _text(cls, value: Any) -> str:
        return coerce_text_or_empty(value)

    @model_validator(mode="after")
    def _require_title_and_content(self) -> "CreatePostArguments":
        if not self.title.strip() or not self.content.strip():
            raise ToolInputError("title and content are required")
        return self

    @property
    def effective_status(self) -> str:
        return PostStatus.coerce(self.status).value


class PostIdArguments(ToolArguments):
    post_id: int = 0

    @field_validator("post_id", mode="before")
    @classmethod
    def _default_id(cls, value: Any) -> Any:
        if value is None or value == "":
            return 0
        return value

    @model_validator(mode="after")
    def _require_post_id(self) -> "PostIdArguments":
        if self.post_id <= 0:
            raise ToolInputError("post_id is required")
        return self


class UpdatePostArguments(PostIdArguments):
    title: Optional[str] = None
    content: Optional[str] = None
    status: Optional[str] = None

    @field_validator("title", "content", "status", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return coerce_text(value)


class ListPostsArguments(ToolArguments):
    limit: int = DEFAULT_LIST_LIMIT
    status: str = PostStatus.PUBLISH.value

    @field_validator("limit", mode="before")
    @classmethod
    def _default_limit(cls, value: Any) -> Any:
        return DEFAULT_LIST_LIMIT if value is None or value == "" else value

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> str:
        return coerce_text(value) or PostStatus.PUBLISH.value

    @field_validator("limit")
    @classmethod
    def _cap_limit(cls, value: int) -> int:
        if value < 1:
            return DEFAULT_LIST_LIMIT
        return min(value, MAX_LIST_LIMIT)


def create_create_post_tool(backend: ContentBackend, prefix: str) -> MCPToolSpec:
    """Create the create-post tool."""

    async def handler(args: CreatePostArguments) -> MCPToolResult:
        body = args.content
        if args.cloudinary_url:
            body = f"{build_image_tag(args.cloudinary_url, args.title)}\n\n{body}"

        draft = PostDraft(
            title=sanitize_text_field(args.title),
            body=sanitize_post_html(body),
            status=args.effective_status,
        )

        try:
            post = await backend.create_post(draft)
        except ContentBackendError as e:
            logger.warning("create_post_failed", error=str(e))
            return MCPToolResult.text(f"Error creating post: {e}")

        meta_error: Optional[str] = None
        try:
            if args.cloudinary_public_id:
                await backend.set_meta(
                    post.id,
                    META_CLOUDINARY_PUBLIC_ID,
                    sanitize_text_field(args.cloudinary_public_id),
                )
            if args.cloudinary_url:
                await backend.set_meta(post.id, META_CLOUDINARY_URL, args.cloudinary_url.strip())
        except ContentBackendError as e:
            logger.warning("create_post_meta_failed", post_id=post.id, error=str(e))
            meta_error = str(e)

        text = "Post created successfully!\n\n"
        text += f"• Title: {post.title}\n"
        text += f"• ID: {post.id}\n"
        text += f"• Status: {post.status}\n"
        text += f"• URL: {post.permalink}\n"
        if args.cloudinary_url:
            text += "• Cloudinary Image: Embedded\n"
        if meta_error:
            text += f"• Warning: Cloudinary metadata not saved: {meta_error}\n"

        return MCPToolResult.text(text)

    return MCPToolSpec(
        name=f"{prefix}create-post",
        description="Create a new WordPress post with optional Cloudinary image",
        input_schema=create_tool_input_schema(
            properties={
                "title": {"type": "string", "description": "Post title"},
                "content": {"type": "string", "description": "Post content (HTML allowed)"},
                "status": {
                    "type": "string",
                    "description": "Post status: publish, draft, pending",
                    "default": "publish",
                },
                "cloudinary_url": {
                    "type": "string",
                    "description": "Cloudinary image URL to embed in post (optional)",
                },
                "cloudinary_public_id": {
                    "type": "string",
                    "description": "Cloudinary public_id to store as post meta (optional)",
                },
            },
            required=["title", "content"],
        ),
        handler=handler,
        arguments_model=CreatePostArguments,
        invalid_arguments_message="title and content are required",
        category="posts",
    )


def create_update_post_tool(backend: ContentBackend, prefix: str) -> MCPToolSpec:
    """Create the update-post tool. Absent fields are left untouched."""

    async def handler(args: UpdatePostArguments) -> MCPToolResult:
        existing = await backend.get_post(args.post_id)
        if existing is None:
            return MCPToolResult.error(f"Post with ID {args.post_id} not found")

        changes = PostChanges(
            title=sanitize_text_field(args.title) if args.title is not None else None,
            body=sanitize_post_html(args.content) if args.content is not None else None,
            status=sanitize_text_field(args.status) if args.status is not None else None,
        )

        try:
            await backend.update_post(args.post_id, changes)
        except PostNotFoundError:
            return MCPToolResult.error(f"Post with ID {args.post_id} not found")
        except ContentBackendError as e:
            logger.warning("update_post_failed", post_id=args.post_id, error=str(e))
            return MCPToolResult.text(f"Error updating post: {e}")

        return MCPToolResult.text(f"Post {args.post_id} updated successfully!")

    return MCPToolSpec(
        name=f"{prefix}update-post",
        description="Update an existing WordPress post",
        input_schema=create_tool_input_schema(
            properties={
                "post_id": {"type": "integer", "description": "WordPress post ID"},
                "title": {"type": "string", "description": "Post title (optional)"},
                "content": {"type": "string", "description": "Post content (optional)"},
                "status": {"type": "string", "description": "Post status (optional)"},
            },
            required=["post_id"],
        ),
        handler=handler,
        arguments_model=UpdatePostArguments,
        invalid_arguments_message="post_id is required",
        category="posts",
    )


def create_get_post_tool(backend: ContentBackend, prefix: str) -> MCPToolSpec:
    """Create the get-post tool."""

    async def handler(args: PostIdArguments) -> MCPToolResult:
        post = await backend.get_post(args.post_id)
        if post is None:
            return MCPToolResult.error(f"Post with ID {args.post_id} not found")

        public_id = await backend.get_meta(post.id, META_CLOUDINARY_PUBLIC_ID)
        image_url = await backend.get_meta(post.id, META_CLOUDINARY_URL)

        text = "Post Details:\n\n"
        text += f"• ID: {post.id}\n"
        text += f"• Title: {post.title}\n"
        text += f"• Status: {post.status}\n"
        text += f"• Date: {post.created_at}\n"
        text += f"• URL: {post.permalink}\n"
        if public_id:
            text += f"• Cloudinary Public ID: {public_id}\n"
        if image_url:
            text += f"• Cloudinary URL: {image_url}\n"
        text += "\nContent:\n" + trim_words(post.body, EXCERPT_WORDS)

        return MCPToolResult.text(text)

    return MCPToolSpec(
        name=f"{prefix}get-post",
        description="Get details of a specific WordPress post",
        input_schema=create_tool_input_schema(
            properties={
                "post_id": {"type": "integer", "description": "WordPress post ID"},
            },
            required=["post_id"],
        ),
        handler=handler,
        arguments_model=PostIdArguments,
        invalid_arguments_message="post_id is required",
        category="posts",
    )


def create_list_posts_tool(backend: ContentBackend, prefix: str) -> MCPToolSpec:
    """Create the list-posts tool."""

    async def handler(args: ListPostsArguments) -> MCPToolResult:
        posts = await backend.list_posts(status=args.status, limit=args.limit)

        if not posts:
            return MCPToolResult.text(f"No posts found with status: {args.status}")

        text = f"Found {len(posts)} posts:\n\n"
        for post in posts:
            text += f"• {post.title} (ID: {post.id})\n"
            text += f"  - Status: {post.status}\n"
            text += f"  - Date: {post.created_at}\n"
            text += f"  - URL: {post.permalink}\n\n"

        return MCPToolResult.text(text)

    return MCPToolSpec(
        name=f"{prefix}list-posts",
        description="List WordPress posts",
        input_schema=create_tool_input_schema(
            properties={
                "limit": {
                    "type": "integer",
                    "description": "Number of posts to return",
                    "default": DEFAULT_LIST_LIMIT,
                },
                "status": {
                    "type": "string",
                    "description": "Filter by status: publish, draft, any",
                    "default": "publish",
                },
            },
        ),
        handler=handler,
        arguments_model=ListPostsArguments,
        invalid_arguments_message="limit must be an integer",
        category="posts",
    )


def register_post_tools(
    registry: MCPServerRegistry,
    backend: ContentBackend,
    prefix: str,
) -> None:
    """Register post management tools with the registry."""
    registry.register(create_create_post_tool(backend, prefix))
    registry.register(create_update_post_tool(backend, prefix))
    registry.register(create_get_post_tool(backend, prefix))
    registry.register(create_list_posts_tool(backend, prefix))
