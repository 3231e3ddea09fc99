"""In-process content backend.

Keeps posts and post meta in memory. Used as the default backend for
local runs and throughout the test suite.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import structlog

from .base import ContentBackend, PostNotFoundError
from .models import ANY_STATUS, ContentItem, PostChanges, PostDraft, SiteInfo

logger = structlog.get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class InMemoryContentBackend(ContentBackend):
    """Content store backed by a dict of posts.

    Ids are sequential starting at 1. Permalinks follow the
    ``<site_url>/?p=<id>`` form.
    """

    def __init__(self, site: SiteInfo) -> None:
        self._site = site
        self._posts: dict[int, ContentItem] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    @property
    def posts(self) -> dict[int, ContentItem]:
        """Stored posts keyed by id."""
        return self._posts

    def _permalink(self, post_id: int) -> str:
        return f"{self._site.url.rstrip('/')}/?p={post_id}"

    async def get_site_info(self) -> SiteInfo:
        return self._site

    async def flush_cache(self) -> bool:
        # Nothing is cached in front of the dict.
        return False

    async def create_post(self, draft: PostDraft) -> ContentItem:
        async with self._lock:
            post_id = self._next_id
            self._next_id += 1
            item = ContentItem(
                id=post_id,
                title=draft.title,
                body=draft.body,
                status=draft.status,
                created_at=datetime.now(timezone.utc).strftime(DATE_FORMAT),
                permalink=self._permalink(post_id),
            )
            self._posts[post_id] = item
        logger.info("content_post_created", post_id=post_id, status=draft.status)
        return item

    async def update_post(self, post_id: int, changes: PostChanges) -> ContentItem:
        async with self._lock:
            current = self._posts.get(post_id)
            if current is None:
                raise PostNotFoundError(post_id)
            updated = replace(
                current,
                title=changes.title if changes.title is not None else current.title,
                body=changes.body if changes.body is not None else current.body,
                status=changes.status if changes.status is not None else current.status,
            )
            self._posts[post_id] = updated
        logger.info("content_post_updated", post_id=post_id)
        return updated

    async def get_post(self, post_id: int) -> Optional[ContentItem]:
        return self._posts.get(post_id)

    async def list_posts(self, status: str, limit: int) -> list[ContentItem]:
        matching = [
            item
            for item in self._posts.values()
            if status == ANY_STATUS or item.status == status
        ]
        matching.sort(key=lambda item: (item.created_at, item.id), reverse=True)
        return matching[:limit]

    async def set_meta(self, post_id: int, key: str, value: str) -> None:
        item = self._posts.get(post_id)
        if item is None:
            raise PostNotFoundError(post_id)
        item.metadata[key] = value

    async def get_meta(self, post_id: int, key: str) -> Optional[str]:
        item = self._posts.get(post_id)
        if item is None:
            return None
        return item.metadata.get(key)
