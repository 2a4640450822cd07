"""
ReviewService - review lifecycle and rating summary upkeep.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from review_api.core.errors import ConflictError, ForbiddenError, NotFoundError, parse_payload
from review_api.core.locks import KeyedLock
from review_api.core.query import query_reviews
from review_api.core.rating import compute_summary
from review_api.core.store import ReviewStore
from review_api.core.summary_cache import MemorySummaryCache, RedisSummaryCache
from review_api.schemas.reviews import (
    RatingSummary, Review, ReviewPage, ReviewQuery, ReviewResponse,
    ReviewSubmit, ReviewUpdate, ResponseCreate
)

logger = logging.getLogger(__name__)


# Update fields replaced only when sent with a truthy value
MERGED_FIELDS = ("author_name", "author_image_url", "rating", "content", "metadata")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ReviewService:
    """
    Orchestrates review mutations against a ReviewStore.

    Every mutation that changes an item's ratings recomputes that item's
    summary into the cache. Store mutations are serialized per review id and
    summary recomputation per item id; locks are always taken review first,
    then item.
    """

    def __init__(
        self,
        store: ReviewStore,
        cache: Optional[Union[MemorySummaryCache, RedisSummaryCache]] = None,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id
    ):
        self.store = store
        self.cache = cache if cache is not None else MemorySummaryCache()
        self.clock = clock
        self.id_factory = id_factory
        self._review_locks = KeyedLock()
        self._item_locks = KeyedLock()

    def _require(self, review_id: str) -> Review:
        review = self.store.find_by_id(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review

    async def _refresh_summary(self, item_id: str, reviews: Optional[List[Review]] = None) -> RatingSummary:
        """
        Compute and cache an item's summary. Caller holds the item lock.

        Mutations pass the item's reviews as they will be after the change and
        commit to the store only once this returns. When the cache write
        fails, the item's cache entry is dropped and the error re-raised.
        """
        if reviews is None:
            reviews = self.store.find_by_item(item_id)
        summary = compute_summary(item_id, reviews)
        try:
            await self.cache.set(summary)
        except Exception:
            try:
                await self.cache.invalidate(item_id)
            except Exception as e:
                logger.warning(f"Failed to invalidate rating summary for item {item_id}: {str(e)}")
            raise
        return summary

    def get(self, review_id: str) -> Review:
        """Get a review or raise NotFoundError."""
        return self._require(review_id)

    def query(self, params: ReviewQuery) -> ReviewPage:
        """List an item's reviews with filters, sorting and pagination."""
        return query_reviews(self.store.all(), params)

    def has_reviewed(self, item_id: str, author_id: str) -> bool:
        return self.store.find_by_item_and_author(item_id, author_id) is not None

    async def submit(self, review_data: Union[ReviewSubmit, dict], image_urls: Optional[List[str]] = None) -> Review:
        """
        Create a review.

        Args:
            review_data: ReviewSubmit or raw mapping
            image_urls: Public URLs of already stored images

        Returns:
            Created review

        Raises:
            ValidationError: If required fields are missing
            ConflictError: If the author already reviewed the item or the id is taken
        """
        data = parse_payload(ReviewSubmit, review_data)

        async with self._item_locks.hold(data.item_id):
            if self.store.find_by_item_and_author(data.item_id, data.author_id):
                raise ConflictError("User has already reviewed this item")
            if data.id and self.store.find_by_id(data.id):
                raise ConflictError(f"Review {data.id} already exists")

            now = self.clock()
            review = Review(
                id=data.id or self.id_factory(),
                author_id=data.author_id,
                author_name=data.author_name,
                author_image_url=data.author_image_url,
                item_id=data.item_id,
                rating=data.rating,
                title=data.title,
                content=data.content,
                image_urls=list(image_urls or []),
                created_at=now,
                updated_at=now,
                is_verified=False,
                responses=[],
                helpful_count=0,
                metadata=data.metadata
            )
            await self._refresh_summary(review.item_id, self.store.find_by_item(review.item_id) + [review])
            self.store.insert(review)

        return review

    async def update(
        self,
        review_id: str,
        review_data: Union[ReviewUpdate, dict],
        image_urls: Optional[List[str]] = None
    ) -> Tuple[Review, List[str]]:
        """
        Merge a partial update into a review.

        Title is replaced whenever it is sent, even empty. Other fields are
        replaced only by truthy values. New image URLs replace the old list.

        Returns:
            Updated review and the image URLs it no longer references

        Raises:
            NotFoundError: If the review does not exist
            ForbiddenError: If authorId does not match the review's author
            ValidationError: If the payload is malformed
        """
        async with self._review_locks.hold(review_id):
            existing = self._require(review_id)
            data = parse_payload(ReviewUpdate, review_data)

            if data.author_id != existing.author_id:
                raise ForbiddenError("User does not own this review")

            changes: Dict[str, Any] = {}
            for field in MERGED_FIELDS:
                value = getattr(data, field)
                if value:
                    changes[field] = value
            if "title" in data.model_fields_set:
                changes["title"] = data.title
            changes["image_urls"] = list(image_urls) if image_urls else list(existing.image_urls)
            changes["updated_at"] = self.clock()

            updated = existing.model_copy(update=changes)
            replaced_urls = [url for url in existing.image_urls if url not in updated.image_urls]

            async with self._item_locks.hold(existing.item_id):
                reviews = [updated if r.id == review_id else r for r in self.store.find_by_item(existing.item_id)]
                await self._refresh_summary(existing.item_id, reviews)
                self.store.replace(review_id, updated)

        return updated, replaced_urls

    async def delete(self, review_id: str) -> Review:
        """
        Remove a review and refresh its item's summary.

        Returns:
            The removed review

        Raises:
            NotFoundError: If the review does not exist
        """
        async with self._review_locks.hold(review_id):
            review = self._require(review_id)
            async with self._item_locks.hold(review.item_id):
                reviews = [r for r in self.store.find_by_item(review.item_id) if r.id != review_id]
                await self._refresh_summary(review.item_id, reviews)
                self.store.remove(review_id)
        return review

    async def add_response(self, review_id: str, response_data: Union[ResponseCreate, dict]) -> Review:
        """
        Append a response to a review.

        Raises:
            ValidationError: If authorId, authorName or content is missing
            NotFoundError: If the review does not exist
        """
        data = parse_payload(ResponseCreate, response_data)

        async with self._review_locks.hold(review_id):
            review = self._require(review_id)
            now = self.clock()
            review.responses.append(ReviewResponse(
                id=data.id or self.id_factory(),
                author_id=data.author_id,
                author_name=data.author_name,
                author_image_url=data.author_image_url,
                content=data.content,
                created_at=now,
                is_official=data.is_official
            ))
            review.updated_at = now
            self.store.replace(review_id, review)

        return review

    async def set_helpful(self, review_id: str, is_helpful: bool) -> int:
        """
        Count a helpful vote up or down. The count never drops below 0.

        Returns:
            New helpful count
        """
        async with self._review_locks.hold(review_id):
            review = self._require(review_id)
            if is_helpful:
                review.helpful_count += 1
            else:
                review.helpful_count = max(0, review.helpful_count - 1)
            self.store.replace(review_id, review)
            return review.helpful_count

    async def get_rating_summary(self, item_id: str) -> RatingSummary:
        """Cached summary, computed and cached on a miss."""
        summary = await self.cache.get(item_id)
        if summary is not None:
            return summary
        async with self._item_locks.hold(item_id):
            return await self._refresh_summary(item_id)
