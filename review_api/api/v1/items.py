"""
Item-level endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from review_api.core.service import ReviewService
from review_api.deps import get_review_service
from review_api.schemas.reviews import RatingSummary

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{item_id}/rating-summary", response_model=RatingSummary)
async def get_rating_summary(item_id: str, service: ReviewService = Depends(get_review_service)):
    """Average rating, review count and star histogram for an item."""
    try:
        return await service.get_rating_summary(item_id)
    except Exception as e:
        logger.exception(f"Error computing rating summary for item {item_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get rating summary"
        )
