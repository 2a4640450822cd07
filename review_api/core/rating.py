"""
Rating summary aggregation.
"""

import math
from typing import Dict, Iterable

from review_api.schemas.reviews import RatingSummary, Review


STAR_KEYS = ("1", "2", "3", "4", "5")


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 toward positive infinity."""
    return math.floor(value + 0.5)


def compute_summary(item_id: str, reviews: Iterable[Review]) -> RatingSummary:
    """
    Compute average, count and star histogram for an item's reviews.

    Ratings outside 1..5 land in their own rounded bucket next to the five
    zero-filled star keys.

    Args:
        item_id: Item the reviews belong to
        reviews: Reviews of that item

    Returns:
        RatingSummary (average 0 and all-zero histogram when empty)
    """
    rating_counts: Dict[str, int] = {key: 0 for key in STAR_KEYS}
    total = 0
    rating_sum = 0.0

    for review in reviews:
        total += 1
        rating_sum += review.rating
        key = str(round_half_up(review.rating))
        rating_counts[key] = rating_counts.get(key, 0) + 1

    average = rating_sum / total if total else 0

    return RatingSummary(
        item_id=item_id,
        average_rating=average,
        total_reviews=total,
        rating_counts=rating_counts
    )
