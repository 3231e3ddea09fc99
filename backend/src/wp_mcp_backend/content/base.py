"""Content backend protocol.

Defines the narrow interface the MCP post tools use to reach the
content-management store.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.errors import BackendError
from .models import ContentItem, PostChanges, PostDraft, SiteInfo


class ContentBackendError(BackendError):
    """Generic content store failure.

    ``status_code`` carries the HTTP status when the store answered with one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PostNotFoundError(ContentBackendError):
    """Raised when a post id does not exist."""

    def __init__(self, post_id: int) -> None:
        self.post_id = post_id
        super().__init__(f"Post with ID {post_id} not found")


class ContentBackend(ABC):
    """Abstract base class for content stores.

    Example:
        class MyBackend(ContentBackend):
            async def get_post(self, post_id: int) -> Optional[ContentItem]:
                ...
    """

    @abstractmethod
    async def get_site_info(self) -> SiteInfo:
        """Return site name, URL, description, platform version and admin contact."""
        ...

    @abstractmethod
    async def flush_cache(self) -> bool:
        """Flush the host cache.

        Returns:
            True if a cache layer was flushed, False if none exists
        """
        ...

    @abstractmethod
    async def create_post(self, draft: PostDraft) -> ContentItem:
        """Persist a new post.

        Raises:
            ContentBackendError: If the store rejects the post
        """
        ...

    @abstractmethod
    async def update_post(self, post_id: int, changes: PostChanges) -> ContentItem:
        """Merge ``changes`` into an existing post.

        Raises:
            PostNotFoundError: If the post does not exist
            ContentBackendError: If the store rejects the update
        """
        ...

    @abstractmethod
    async def get_post(self, post_id: int) -> Optional[ContentItem]:
        """Fetch a post by id, or None if it does not exist."""
        ...

    @abstractmethod
    async def list_posts(self, status: str, limit: int) -> list[ContentItem]:
        """List posts with ``status`` (or ``any``), newest first."""
        ...

    @abstractmethod
    async def set_meta(self, post_id: int, key: str, value: str) -> None:
        """Attach a metadata value to a post."""
        ...

    @abstractmethod
    async def get_meta(self, post_id: int, key: str) -> Optional[str]:
        """Read a metadata value, or None if unset."""
        ...

    async def close(self) -> None:
        """Release any resources held by the backend."""
        return None
