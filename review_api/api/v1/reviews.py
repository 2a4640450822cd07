"""
Reviews API endpoints.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from starlette.datastructures import UploadFile

from review_api.core.errors import MissingParameterError, ReviewError, ValidationError, parse_payload
from review_api.core.image_storage import ImageStorage
from review_api.core.service import ReviewService
from review_api.deps import get_image_storage, get_review_service
from review_api.schemas.common import ErrorResponse, SuccessResponse
from review_api.schemas.reviews import (
    HasReviewedResult, HelpfulVote, HelpfulVoteResult, Review, ReviewPage,
    ReviewQuery, ReviewSubmit
)

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _http_error(error: ReviewError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


async def read_review_payload(request: Request) -> Tuple[Any, List[UploadFile]]:
    """
    Extract review data and image files from a request.

    Accepts a JSON body, or a form whose "review" field is a JSON blob
    alongside "images" files, or a form of plain fields.

    Raises:
        ValidationError: If the JSON is malformed
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            return await request.json(), []
        except ValueError:
            raise ValidationError("Invalid JSON body")

    form = await request.form()
    images = [f for f in form.getlist("images") if isinstance(f, UploadFile)]

    raw_review = form.get("review")
    if isinstance(raw_review, str):
        try:
            return json.loads(raw_review), images
        except json.JSONDecodeError:
            raise ValidationError("Invalid review JSON")

    fields = {key: value for key, value in form.multi_items() if isinstance(value, str)}
    return fields, images


@router.get("", response_model=ReviewPage, responses=ERROR_RESPONSES)
async def list_reviews(
    item_id: Optional[str] = Query(None, alias="itemId"),
    page: int = Query(1, description="1-indexed page"),
    limit: int = Query(10, description="Page size"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", description="asc or desc"),
    min_rating: Optional[float] = Query(None, alias="minRating"),
    max_rating: Optional[float] = Query(None, alias="maxRating"),
    service: ReviewService = Depends(get_review_service)
):
    """List an item's reviews with rating filters, sorting and pagination."""
    params = ReviewQuery(
        item_id=item_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        min_rating=min_rating,
        max_rating=max_rating
    )
    try:
        return service.query(params)
    except ReviewError as e:
        raise _http_error(e)


@router.get("/check", response_model=HasReviewedResult, responses=ERROR_RESPONSES)
async def check_reviewed(
    item_id: Optional[str] = Query(None, alias="itemId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    service: ReviewService = Depends(get_review_service)
):
    """Tell whether a user already reviewed an item."""
    if not item_id or not user_id:
        raise _http_error(MissingParameterError("itemId and userId are required"))
    return HasReviewedResult(has_reviewed=service.has_reviewed(item_id, user_id))


@router.get("/{review_id}", response_model=Review, responses=ERROR_RESPONSES)
async def get_review(review_id: str, service: ReviewService = Depends(get_review_service)):
    """Get a single review."""
    try:
        return service.get(review_id)
    except ReviewError as e:
        raise _http_error(e)


@router.post("", response_model=Review, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def submit_review(
    request: Request,
    service: ReviewService = Depends(get_review_service),
    storage: ImageStorage = Depends(get_image_storage)
):
    """
    Submit a review.

    Multipart body: "review" JSON blob plus up to 5 "images" files.
    A JSON body is accepted for reviews without images.
    """
    image_urls: List[str] = []
    try:
        raw_review, images = await read_review_payload(request)
        review_data = parse_payload(ReviewSubmit, raw_review)
        image_urls = await storage.save(review_data.item_id, images)
        return await service.submit(review_data, image_urls)
    except HTTPException:
        storage.delete(image_urls)
        raise
    except ReviewError as e:
        storage.delete(image_urls)
        raise _http_error(e)
    except Exception as e:
        storage.delete(image_urls)
        logger.exception(f"Error submitting review: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit review"
        )


@router.put("/{review_id}", response_model=Review, responses={**ERROR_RESPONSES, 403: {"model": ErrorResponse}})
async def update_review(
    review_id: str,
    request: Request,
    service: ReviewService = Depends(get_review_service),
    storage: ImageStorage = Depends(get_image_storage)
):
    """
    Update a review owned by the caller.

    New images replace the old ones, whose files are removed.
    """
    image_urls: List[str] = []
    try:
        existing = service.get(review_id)

        raw_review, images = await read_review_payload(request)
        image_urls = await storage.save(existing.item_id, images)
        updated, replaced_urls = await service.update(review_id, raw_review, image_urls)

        storage.delete(replaced_urls)
        return updated
    except HTTPException:
        storage.delete(image_urls)
        raise
    except ReviewError as e:
        storage.delete(image_urls)
        raise _http_error(e)
    except Exception as e:
        storage.delete(image_urls)
        logger.exception(f"Error updating review {review_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update review"
        )


@router.delete("/{review_id}", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def delete_review(
    review_id: str,
    service: ReviewService = Depends(get_review_service),
    storage: ImageStorage = Depends(get_image_storage)
):
    """Delete a review and its images."""
    try:
        review = await service.delete(review_id)
    except ReviewError as e:
        raise _http_error(e)

    storage.delete(review.image_urls)
    return SuccessResponse()


@router.post(
    "/{review_id}/responses",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES
)
async def add_response(
    review_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    service: ReviewService = Depends(get_review_service)
):
    """Add a response to a review. Returns the full review."""
    try:
        return await service.add_response(review_id, payload)
    except ReviewError as e:
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Error adding response to review {review_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add response"
        )


@router.post("/{review_id}/helpful", response_model=HelpfulVoteResult, responses=ERROR_RESPONSES)
async def mark_helpful(
    review_id: str,
    payload: Optional[HelpfulVote] = Body(None),
    service: ReviewService = Depends(get_review_service)
):
    """Count a helpful vote up (isHelpful true) or down."""
    vote = payload or HelpfulVote()
    try:
        count = await service.set_helpful(review_id, vote.is_helpful)
    except ReviewError as e:
        raise _http_error(e)
    return HelpfulVoteResult(helpful_count=count)
