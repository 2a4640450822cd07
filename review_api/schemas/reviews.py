"""
Schemas for reviews, responses and rating summaries.

Wire names are camelCase. Inputs also accept snake_case and the legacy
userId/userName/userImageUrl spellings.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel, to_snake


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _author_field(alias: str, legacy: str, **kwargs) -> Any:
    """Field accepting camelCase, snake_case and the legacy user* key."""
    return Field(
        validation_alias=AliasChoices(alias, legacy, to_snake(alias)),
        serialization_alias=alias,
        **kwargs
    )


class ReviewResponse(CamelModel):
    """Reply attached to a review. Immutable once created."""
    id: str
    author_id: str = _author_field("authorId", "userId")
    author_name: str = _author_field("authorName", "userName")
    author_image_url: Optional[str] = _author_field("authorImageUrl", "userImageUrl", default=None)
    content: str
    created_at: datetime
    is_official: bool = False


class Review(CamelModel):
    """A user's rated opinion on one item."""
    id: str
    author_id: str = _author_field("authorId", "userId")
    author_name: str = _author_field("authorName", "userName")
    author_image_url: Optional[str] = _author_field("authorImageUrl", "userImageUrl", default=None)
    item_id: str
    rating: float = Field(..., allow_inf_nan=False)
    title: Optional[str] = None
    content: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    is_verified: bool = False
    responses: List[ReviewResponse] = Field(default_factory=list)
    helpful_count: int = Field(0, ge=0)
    metadata: Optional[Dict[str, Any]] = None


class ReviewSubmit(CamelModel):
    """Payload for submitting a review."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    author_id: str = _author_field("authorId", "userId", min_length=1)
    author_name: str = _author_field("authorName", "userName", min_length=1)
    author_image_url: Optional[str] = _author_field("authorImageUrl", "userImageUrl", default=None)
    item_id: str = Field(..., min_length=1)
    rating: float = Field(..., allow_inf_nan=False)
    title: Optional[str] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ReviewUpdate(CamelModel):
    """
    Partial update payload.

    Fields left out are "not provided". Use model_fields_set to tell them
    apart from fields sent as null or empty.
    """
    model_config = ConfigDict(extra="ignore")

    author_id: Optional[str] = _author_field("authorId", "userId", default=None)
    author_name: Optional[str] = _author_field("authorName", "userName", default=None)
    author_image_url: Optional[str] = _author_field("authorImageUrl", "userImageUrl", default=None)
    rating: Optional[float] = Field(None, allow_inf_nan=False)
    title: Optional[str] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ResponseCreate(CamelModel):
    """Payload for adding a response to a review."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    author_id: str = _author_field("authorId", "userId", min_length=1)
    author_name: str = _author_field("authorName", "userName", min_length=1)
    author_image_url: Optional[str] = _author_field("authorImageUrl", "userImageUrl", default=None)
    content: str = Field(..., min_length=1)
    is_official: bool = False


class HelpfulVote(CamelModel):
    """Helpful vote request."""
    is_helpful: bool = False


class HelpfulVoteResult(CamelModel):
    success: bool = True
    helpful_count: int


class RatingSummary(CamelModel):
    """Aggregate rating statistics for one item."""
    item_id: str
    average_rating: float = 0
    total_reviews: int = 0
    rating_counts: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "itemId": "p1",
            "averageRating": 4.0,
            "totalReviews": 1,
            "ratingCounts": {"1": 0, "2": 0, "3": 0, "4": 1, "5": 0}
        }
    })


class ReviewQuery(CamelModel):
    """Filter, sort and pagination parameters for listing reviews."""
    item_id: Optional[str] = None
    page: int = 1
    limit: int = 10
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None


class ReviewPage(CamelModel):
    """Paginated list of reviews."""
    reviews: List[Review]
    total_count: int
    page: int
    limit: int
    total_pages: int


class HasReviewedResult(CamelModel):
    has_reviewed: bool
