"""Tests for the in-memory content backend."""

import pytest

from wp_mcp_backend.content import (
    InMemoryContentBackend,
    PostChanges,
    PostDraft,
    PostNotFoundError,
)


class TestInMemoryContentBackend:
    """Tests for InMemoryContentBackend."""

    @pytest.mark.asyncio
    async def test_create_assigns_sequential_ids(self, memory_backend):
        first = await memory_backend.create_post(PostDraft(title="A", body="a", status="publish"))
        second = await memory_backend.create_post(PostDraft(title="B", body="b", status="draft"))

        assert (first.id, second.id) == (1, 2)
        assert first.permalink == "https://test.example.com/?p=1"
        assert len(first.created_at) == len("2024-01-01 00:00:00")
        assert first.metadata == {}

    @pytest.mark.asyncio
    async def test_get_post(self, memory_backend):
        await memory_backend.create_post(PostDraft(title="A", body="a", status="publish"))
        assert (await memory_backend.get_post(1)).title == "A"
        assert await memory_backend.get_post(2) is None

    @pytest.mark.asyncio
    async def test_update_merges_present_fields(self, memory_backend):
        await memory_backend.create_post(PostDraft(title="A", body="a", status="draft"))

        updated = await memory_backend.update_post(1, PostChanges(body="new body"))

        assert updated.title == "A"
        assert updated.body == "new body"
        assert updated.status == "draft"
        assert (await memory_backend.get_post(1)).body == "new body"

    @pytest.mark.asyncio
    async def test_update_missing_post(self, memory_backend):
        with pytest.raises(PostNotFoundError, match="Post with ID 4 not found"):
            await memory_backend.update_post(4, PostChanges(title="x"))

    @pytest.mark.asyncio
    async def test_update_keeps_metadata(self, memory_backend):
        await memory_backend.create_post(PostDraft(title="A", body="a", status="publish"))
        await memory_backend.set_meta(1, "cloudinary_url", "https://x/y.jpg")
        await memory_backend.update_post(1, PostChanges(title="B"))
        assert await memory_backend.get_meta(1, "cloudinary_url") == "https://x/y.jpg"

    @pytest.mark.asyncio
    async def test_list_orders_newest_first_and_filters(self, memory_backend):
        for title, status in [("A", "publish"), ("B", "draft"), ("C", "publish")]:
            await memory_backend.create_post(PostDraft(title=title, body="", status=status))

        published = await memory_backend.list_posts(status="publish", limit=10)
        everything = await memory_backend.list_posts(status="any", limit=10)
        limited = await memory_backend.list_posts(status="any", limit=2)

        assert [post.title for post in published] == ["C", "A"]
        assert [post.title for post in everything] == ["C", "B", "A"]
        assert [post.title for post in limited] == ["C", "B"]

    @pytest.mark.asyncio
    async def test_list_uses_created_at(self, memory_backend):
        await memory_backend.create_post(PostDraft(title="Old", body="", status="publish"))
        await memory_backend.create_post(PostDraft(title="New", body="", status="publish"))
        memory_backend.posts[1].created_at = "2999-01-01 00:00:00"

        posts = await memory_backend.list_posts(status="publish", limit=10)

        assert [post.title for post in posts] == ["Old", "New"]

    @pytest.mark.asyncio
    async def test_meta(self, memory_backend):
        await memory_backend.create_post(PostDraft(title="A", body="", status="publish"))
        await memory_backend.set_meta(1, "cloudinary_public_id", "folder/x")

        assert await memory_backend.get_meta(1, "cloudinary_public_id") == "folder/x"
        assert await memory_backend.get_meta(1, "cloudinary_url") is None
        assert await memory_backend.get_meta(9, "cloudinary_url") is None
        with pytest.raises(PostNotFoundError):
            await memory_backend.set_meta(9, "cloudinary_url", "x")

    @pytest.mark.asyncio
    async def test_flush_cache(self, memory_backend, site_info):
        assert await memory_backend.flush_cache() is False
        assert await memory_backend.get_site_info() == site_info

    @pytest.mark.asyncio
    async def test_permalink_ignores_trailing_slash(self, site_info):
        from dataclasses import replace

        backend = InMemoryContentBackend(replace(site_info, url="https://slash.example.com/"))
        post = await backend.create_post(PostDraft(title="A", body="", status="publish"))
        assert post.permalink == "https://slash.example.com/?p=1"
