"""
Rating summary caches.

Summaries are derived data. ReviewService recomputes and stores them on every
mutation that changes an item's reviews, and reads through on a miss.
"""

from typing import Dict, Optional

import redis.asyncio as aioredis

from review_api.schemas.reviews import RatingSummary


class MemorySummaryCache:
    """Process-local summary cache."""

    def __init__(self):
        self._summaries: Dict[str, RatingSummary] = {}

    async def get(self, item_id: str) -> Optional[RatingSummary]:
        return self._summaries.get(item_id)

    async def set(self, summary: RatingSummary) -> None:
        self._summaries[summary.item_id] = summary

    async def invalidate(self, item_id: str) -> None:
        self._summaries.pop(item_id, None)

    async def close(self) -> None:
        pass


class RedisSummaryCache:
    """Summary cache shared through Redis."""

    def __init__(self, redis_client: aioredis.Redis, ttl: int = 0):
        """
        Initialize Redis summary cache.

        Args:
            redis_client: Redis async client
            ttl: Expiry in seconds, 0 keeps entries until invalidated
        """
        self.redis = redis_client
        self.ttl = ttl

    def _summary_key(self, item_id: str) -> str:
        """Get Redis key for an item's summary."""
        return f"reviews:rating_summary:{item_id}"

    async def get(self, item_id: str) -> Optional[RatingSummary]:
        data = await self.redis.get(self._summary_key(item_id))
        if not data:
            return None
        return RatingSummary.model_validate_json(data)

    async def set(self, summary: RatingSummary) -> None:
        key = self._summary_key(summary.item_id)
        payload = summary.model_dump_json(by_alias=True)
        if self.ttl > 0:
            await self.redis.set(key, payload, ex=self.ttl)
        else:
            await self.redis.set(key, payload)

    async def invalidate(self, item_id: str) -> None:
        await self.redis.delete(self._summary_key(item_id))

    async def close(self) -> None:
        await self.redis.aclose()
