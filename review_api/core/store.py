"""
In-memory review storage.
"""

from typing import Dict, List, Optional

from review_api.core.errors import NotFoundError
from review_api.schemas.reviews import Review


class ReviewStore:
    """
    Mapping of review id to review record.

    Single source of truth for reviews. Not thread-safe; ReviewService
    serializes mutations.
    """

    def __init__(self):
        self._reviews: Dict[str, Review] = {}

    def __len__(self) -> int:
        return len(self._reviews)

    def all(self) -> List[Review]:
        """All reviews in insertion order."""
        return list(self._reviews.values())

    def insert(self, review: Review) -> None:
        """Store a review. Id collisions are the caller's concern."""
        self._reviews[review.id] = review

    def find_by_id(self, review_id: str) -> Optional[Review]:
        return self._reviews.get(review_id)

    def find_by_item(self, item_id: str) -> List[Review]:
        """Reviews for an item in insertion order."""
        return [r for r in self._reviews.values() if r.item_id == item_id]

    def find_by_item_and_author(self, item_id: str, author_id: str) -> Optional[Review]:
        for review in self._reviews.values():
            if review.item_id == item_id and review.author_id == author_id:
                return review
        return None

    def replace(self, review_id: str, review: Review) -> None:
        """
        Replace the record stored under review_id.

        Raises:
            NotFoundError: If review_id is not stored
        """
        if review_id not in self._reviews:
            raise NotFoundError(f"Review {review_id} not found")
        self._reviews[review_id] = review

    def remove(self, review_id: str) -> Review:
        """
        Remove and return a review.

        Raises:
            NotFoundError: If review_id is not stored
        """
        try:
            return self._reviews.pop(review_id)
        except KeyError:
            raise NotFoundError(f"Review {review_id} not found")
