"""Content backend adapters.

The MCP post tools talk to a content-management store only through
``ContentBackend``. Two implementations are provided: an in-memory store
and a WordPress REST API client.
"""

from .base import ContentBackend, ContentBackendError, PostNotFoundError
from .memory import InMemoryContentBackend
from .models import (
    ANY_STATUS,
    META_CLOUDINARY_PUBLIC_ID,
    META_CLOUDINARY_URL,
    ContentItem,
    PostChanges,
    PostDraft,
    PostStatus,
    SiteInfo,
)
from .wordpress import WordPressRestBackend

__all__ = [
    "ANY_STATUS",
    "META_CLOUDINARY_PUBLIC_ID",
    "META_CLOUDINARY_URL",
    "ContentBackend",
    "ContentBackendError",
    "ContentItem",
    "InMemoryContentBackend",
    "PostChanges",
    "PostDraft",
    "PostNotFoundError",
    "PostStatus",
    "SiteInfo",
    "WordPressRestBackend",
]
