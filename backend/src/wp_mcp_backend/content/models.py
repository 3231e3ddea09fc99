"""Data models for the content backend.

These mirror the subset of a WordPress post that the MCP tools read and
write.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PostStatus(str, Enum):
    """Post statuses accepted by create-post."""

    PUBLISH = "publish"
    DRAFT = "draft"
    PENDING = "pending"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "PostStatus":
        """Return the matching status, falling back to ``publish``."""
        for status in cls:
            if status.value == value:
                return status
        return cls.PUBLISH


ANY_STATUS = "any"

# Post meta keys written by create-post and read by get-post
META_CLOUDINARY_PUBLIC_ID = "cloudinary_public_id"
META_CLOUDINARY_URL = "cloudinary_url"


@dataclass(frozen=True)
class SiteInfo:
    """Site-level metadata."""

    name: str
    url: str
    description: str
    version: str
    admin_email: str


@dataclass
class ContentItem:
    """A post stored in the content backend.

    Attributes:
        id: Backend identifier
        title: Plain-text title
        body: Sanitized HTML body
        status: publish, draft, pending, or any backend-specific status
        created_at: Creation timestamp as ``YYYY-MM-DD HH:MM:SS``
        permalink: Public URL
        metadata: Key-value post meta
    """

    id: int
    title: str
    body: str
    status: str
    created_at: str
    permalink: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PostDraft:
    """Fields for a new post, already sanitized."""

    title: str
    body: str
    status: str


@dataclass(frozen=True)
class PostChanges:
    """Partial update; ``None`` means leave the field untouched."""

    title: Optional[str] = None
    body: Optional[str] = None
    status: Optional[str] = None

    def is_empty(self) -> bool:
        return self.title is None and self.body is None and self.status is None
