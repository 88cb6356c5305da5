"""Blog repository backed by an in-memory post list.

The backend has no blogs table yet, so posts are served from a fixed list.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from permitsy.core.exceptions import RecordNotFoundError
from permitsy.models.entities import Blog
from permitsy.repositories.base import utc_now

SEED_POSTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "title": "Complete Guide to Tourist Visas",
        "slug": "complete-guide-tourist-visas",
        "content": (
            "Tourist visas are entry permits issued to individuals who want to visit a "
            "country for leisure, sightseeing, and recreational activities. Most tourist "
            "visas are valid for a short period, typically ranging from 30 to 90 days, "
            "depending on the country's regulations."
        ),
        "excerpt": "Everything you need to know about applying for a tourist visa",
        "featured_image": "https://images.pexels.com/photos/2325446/pexels-photo-2325446.jpeg",
        "author_id": "auth0|123456789",
        "published_at": "2023-08-15T09:00:00Z",
        "created_at": "2023-08-10T14:30:00Z",
        "updated_at": "2023-08-14T16:45:00Z",
    },
    {
        "id": "2",
        "title": "Business Visa Requirements for European Countries",
        "slug": "business-visa-requirements-european-countries",
        "content": (
            "When planning a business trip to Europe, it's essential to understand the visa "
            "requirements for each country. European business visas typically require an "
            "invitation letter from a company in the destination country, proof of "
            "sufficient funds, and a detailed travel itinerary."
        ),
        "excerpt": (
            "Learn about the essential requirements for obtaining a business visa to "
            "European countries"
        ),
        "featured_image": "https://images.pexels.com/photos/3183150/pexels-photo-3183150.jpeg",
        "author_id": "auth0|987654321",
        "published_at": "2023-09-05T10:30:00Z",
        "created_at": "2023-09-01T08:15:00Z",
        "updated_at": "2023-09-04T17:20:00Z",
    },
    {
        "id": "3",
        "title": "Changes to Student Visa Policies in 2023",
        "slug": "changes-student-visa-policies-2023",
        "content": (
            "In 2023, several countries have updated their student visa policies to attract "
            "more international students. These changes include extended work permissions "
            "during studies, streamlined application processes, and post-graduation work "
            "opportunities."
        ),
        "excerpt": "Important updates to student visa regulations coming into effect this year",
        "featured_image": "https://images.pexels.com/photos/267885/pexels-photo-267885.jpeg",
        "author_id": "auth0|567891234",
        "published_at": "2023-09-20T14:00:00Z",
        "created_at": "2023-09-15T11:45:00Z",
        "updated_at": "2023-09-19T09:30:00Z",
    },
    {
        "id": "4",
        "title": "How to Prepare for Your Visa Interview",
        "slug": "how-prepare-visa-interview",
        "content": (
            "A visa interview can be a nerve-wracking experience, but proper preparation can "
            "significantly increase your chances of approval. This guide covers common "
            "questions, required documents, and tips for making a positive impression on "
            "visa officers."
        ),
        "excerpt": "Tips and strategies to help you ace your upcoming visa interview",
        "featured_image": "https://images.pexels.com/photos/5668859/pexels-photo-5668859.jpeg",
        "author_id": "auth0|123456789",
        "published_at": "2023-10-10T09:15:00Z",
        "created_at": "2023-10-05T13:20:00Z",
        "updated_at": "2023-10-09T16:00:00Z",
    },
    {
        "id": "5",
        "title": "Digital Nomad Visas: A New Era of Remote Work",
        "slug": "digital-nomad-visas-new-era-remote-work",
        "content": (
            "As remote work becomes increasingly common, many countries are introducing "
            "digital nomad visas to attract foreign professionals. These specialized visas "
            "allow individuals to live and work remotely in a foreign country for extended "
            "periods, typically from several months to a few years."
        ),
        "excerpt": (
            "Exploring the growing trend of visas designed for location-independent "
            "professionals"
        ),
        "featured_image": "https://images.pexels.com/photos/4065876/pexels-photo-4065876.jpeg",
        "author_id": "auth0|987654321",
        "published_at": "2023-11-01T11:45:00Z",
        "created_at": "2023-10-25T09:30:00Z",
        "updated_at": "2023-10-31T14:15:00Z",
    },
]


def transform_to_blog(data: Dict[str, Any]) -> Blog:
    """
    Normalise a raw post row into a Blog.

    Missing text fields become empty strings; published_at and updated_at
    fall back to created_at.

    Args:
        data: Raw row

    Returns:
        Blog entity
    """
    return Blog(
        id=str(data["id"]),
        title=data.get("title") or "",
        slug=data.get("slug") or "",
        content=data.get("content") or "",
        excerpt=data.get("excerpt") or "",
        featured_image=data.get("featured_image") or "",
        author_id=data.get("author_id") or "",
        published_at=data.get("published_at") or data.get("created_at"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at") or data.get("created_at"),
    )


class BlogRepository:
    """Read access to blog posts plus non-persisting admin edits."""

    def __init__(self, posts: Optional[List[Dict[str, Any]]] = None):
        source = SEED_POSTS if posts is None else posts
        self._posts = [transform_to_blog(post) for post in source]

    async def get_all(self) -> List[Blog]:
        """Get every post in stored order."""
        return [post.model_copy() for post in self._posts]

    async def get_recent(self, limit: int = 3) -> List[Blog]:
        """
        Get the most recently published posts.

        Args:
            limit: Number of posts to return

        Returns:
            Posts ordered by published_at, newest first
        """
        ordered = sorted(self._posts, key=lambda post: post.published_at or "", reverse=True)
        return [post.model_copy() for post in ordered[:limit]]

    async def get_by_slug(self, slug: str) -> Optional[Blog]:
        """
        Get a post by slug.

        Args:
            slug: Post slug

        Returns:
            Blog or None when no post has that slug
        """
        for post in self._posts:
            if post.slug == slug:
                return post.model_copy()
        return None

    async def update(self, id: str, data: Dict[str, Any]) -> Blog:
        """
        Merge changes into a post and stamp updated_at.

        The stored list is left untouched; the merged copy is returned.

        Args:
            id: Post ID
            data: Fields to merge

        Returns:
            Merged Blog

        Raises:
            RecordNotFoundError: If no post has that ID
        """
        for post in self._posts:
            if post.id == id:
                logger.info(f"Blog {id} updated with fields: {sorted(data)}")
                return post.model_copy(update={**data, "updated_at": utc_now()})
        raise RecordNotFoundError("Blog", id)

    async def delete(self, id: str) -> None:
        """Record a delete request; posts are not persisted."""
        logger.info(f"Blog with id {id} would be deleted")
