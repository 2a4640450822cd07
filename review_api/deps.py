"""
Dependency injection for FastAPI.

Long-lived objects are built once per app in create_app and kept on
app.state; route dependencies hand them out per request.
"""

import redis.asyncio as aioredis
from fastapi import Request

from review_api.config import Settings
from review_api.core.image_storage import ImageStorage
from review_api.core.service import ReviewService
from review_api.core.store import ReviewStore
from review_api.core.summary_cache import MemorySummaryCache, RedisSummaryCache


def build_redis(settings: Settings) -> aioredis.Redis:
    """Create Redis client with lazy connection."""
    return aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=1.0,
        socket_timeout=3.0,
        retry_on_timeout=True,
        health_check_interval=30
    )


def build_summary_cache(settings: Settings):
    """Summary cache for the configured backend."""
    if settings.summary_cache_backend == "redis":
        return RedisSummaryCache(build_redis(settings), ttl=settings.summary_cache_ttl)
    return MemorySummaryCache()


def build_review_service(settings: Settings) -> ReviewService:
    return ReviewService(ReviewStore(), build_summary_cache(settings))


def build_image_storage(settings: Settings) -> ImageStorage:
    return ImageStorage(
        root=settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        max_size=settings.max_image_size,
        max_files=settings.max_images_per_review
    )


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage
