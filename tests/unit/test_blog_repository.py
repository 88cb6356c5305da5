"""Tests for the blog repository."""

import pytest

from permitsy.core.exceptions import RecordNotFoundError
from permitsy.repositories import BlogRepository, transform_to_blog
from permitsy.repositories.blog_repository import SEED_POSTS


class TestTransformToBlog:
    """Tests for transform_to_blog."""

    def test_fills_missing_fields(self):
        blog = transform_to_blog({"id": 7, "title": "Hello", "created_at": "2024-01-01T00:00:00Z"})

        assert blog.id == "7"
        assert blog.slug == ""
        assert blog.published_at == "2024-01-01T00:00:00Z"
        assert blog.updated_at == "2024-01-01T00:00:00Z"


class TestBlogRepository:
    """Tests for BlogRepository."""

    @pytest.mark.asyncio
    async def test_get_all(self):
        repo = BlogRepository()

        posts = await repo.get_all()

        assert len(posts) == len(SEED_POSTS)

    @pytest.mark.asyncio
    async def test_get_recent_newest_first(self):
        repo = BlogRepository()

        recent = await repo.get_recent()

        assert [p.id for p in recent] == ["5", "4", "3"]

    @pytest.mark.asyncio
    async def test_get_by_slug(self):
        repo = BlogRepository()

        post = await repo.get_by_slug("how-prepare-visa-interview")

        assert post is not None
        assert post.title == "How to Prepare for Your Visa Interview"
        assert await repo.get_by_slug("unknown") is None

    @pytest.mark.asyncio
    async def test_update_returns_merged_copy(self):
        repo = BlogRepository()

        updated = await repo.update("1", {"title": "New title"})
        stored = await repo.get_by_slug("complete-guide-tourist-visas")

        assert updated.title == "New title"
        assert updated.updated_at != stored.updated_at
        assert stored.title == "Complete Guide to Tourist Visas"

    @pytest.mark.asyncio
    async def test_update_unknown_raises(self):
        repo = BlogRepository()

        with pytest.raises(RecordNotFoundError):
            await repo.update("99", {"title": "x"})

    @pytest.mark.asyncio
    async def test_custom_posts(self):
        repo = BlogRepository(posts=[{"id": "a", "slug": "a", "created_at": "2024-01-01"}])

        assert [p.id for p in await repo.get_all()] == ["a"]
        await repo.delete("a")
        assert len(await repo.get_all()) == 1
