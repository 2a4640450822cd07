"""
Main API router for v1.
"""

from fastapi import APIRouter
from review_api.api.v1 import items, reviews

router = APIRouter()

router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
router.include_router(items.router, prefix="/items", tags=["items"])
