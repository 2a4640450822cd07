"""
Filtering, sorting and pagination of review collections.
"""

import math
import unicodedata
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from review_api.core.errors import MissingParameterError, ValidationError
from review_api.schemas.reviews import Review, ReviewPage, ReviewQuery


def _build_sort_fields() -> Dict[str, str]:
    """Map wire names and attribute names to Review attributes."""
    fields = {}
    for name, info in Review.model_fields.items():
        fields[name] = name
        for alias in (info.alias, info.serialization_alias):
            if alias:
                fields[alias] = name
    return fields


SORT_FIELDS = _build_sort_fields()


def collation_key(text: str) -> tuple:
    """Accent- and case-insensitive key, raw text breaks ties."""
    normalized = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in normalized if not unicodedata.combining(c))
    return (base.casefold(), text)


def _sort_value(review: Review, attr: Optional[str]) -> Any:
    """Comparable value for a review field, None when unsortable."""
    if attr is None:
        return None
    value = getattr(review, attr, None)
    if isinstance(value, str):
        return collation_key(value)
    if isinstance(value, (int, float, datetime)):
        return value
    return None


def sort_reviews(reviews: Sequence[Review], sort_by: str, sort_order: str = "desc") -> List[Review]:
    """
    Stable sort by a review field.

    Reviews without a comparable value keep their relative order after the
    sorted ones. Unknown fields leave the order untouched.
    """
    attr = SORT_FIELDS.get(sort_by)
    keyed = [(_sort_value(r, attr), r) for r in reviews]

    present = [(key, r) for key, r in keyed if key is not None]
    missing = [r for key, r in keyed if key is None]

    present.sort(key=lambda pair: pair[0], reverse=(sort_order == "desc"))
    return [r for _, r in present] + missing


def query_reviews(reviews: Sequence[Review], params: ReviewQuery) -> ReviewPage:
    """
    Filter, sort and paginate reviews.

    Args:
        reviews: Candidate reviews (any item)
        params: Query parameters; item_id is required

    Returns:
        ReviewPage with the requested slice and totals

    Raises:
        MissingParameterError: If item_id is missing or empty
        ValidationError: If limit is below 1
    """
    if not params.item_id:
        raise MissingParameterError("itemId is required")
    if params.limit < 1:
        raise ValidationError("limit must be a positive integer")

    filtered = [r for r in reviews if r.item_id == params.item_id]

    if params.min_rating is not None:
        filtered = [r for r in filtered if r.rating >= params.min_rating]
    if params.max_rating is not None:
        filtered = [r for r in filtered if r.rating <= params.max_rating]

    ordered = sort_reviews(filtered, params.sort_by, params.sort_order)

    start = (params.page - 1) * params.limit
    # Pages before the first are empty
    page_items = ordered[start:start + params.limit] if start >= 0 else []

    total = len(ordered)
    return ReviewPage(
        reviews=page_items,
        total_count=total,
        page=params.page,
        limit=params.limit,
        total_pages=math.ceil(total / params.limit)
    )
