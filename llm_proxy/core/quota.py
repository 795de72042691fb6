"""Daily usage quota backed by a shared Redis counter store.

Each admitted request increments two counters for the current UTC day:
one per principal and one global total. Every increment re-sets a 24h
expiry, so the window effectively rolls from the last write rather than
resetting at midnight.

The gate fails open: with no store configured, or on any store error,
requests are admitted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache

import redis.asyncio as redis

from llm_proxy.core.config import settings
from llm_proxy.core.exceptions import QuotaExceededError
from llm_proxy.gateway.types import Principal

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 86400


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def user_key(subject_id: str, day: str) -> str:
    return f"usage:user:{subject_id}:{day}"


def total_key(day: str) -> str:
    return f"usage:total:{day}"


class QuotaGate:
    """Admit or reject a principal's request against a fixed daily limit."""

    def __init__(self, store: redis.Redis | None, daily_limit: int = 50):
        self.store = store
        self.daily_limit = daily_limit

    async def check(self, principal: Principal) -> None:
        """Consume one unit of quota; raise QuotaExceededError past the limit.

        The unit is consumed even when the call is rejected.
        """
        if self.store is None:
            return

        day = _today()
        ukey = user_key(principal.subject_id, day)
        tkey = total_key(day)

        try:
            count = await self.store.incr(ukey)
            await self.store.expire(ukey, WINDOW_SECONDS)
            await self.store.incr(tkey)
            await self.store.expire(tkey, WINDOW_SECONDS)
        except Exception as e:
            logger.warning("Rate limit error: %s", e)
            return

        if count > self.daily_limit:
            logger.info("Quota exceeded for %s (%d/%d)", principal.subject_id, count, self.daily_limit)
            raise QuotaExceededError(f"Daily quota of {self.daily_limit} requests exceeded.")


def create_store(url: str) -> redis.Redis | None:
    """Build a Redis client for the counter store, or None when unconfigured.

    The client connects lazily on first command.
    """
    if not url:
        logger.warning("Redis not configured, rate limiting disabled")
        return None
    try:
        return redis.from_url(url, decode_responses=True)
    except ValueError as e:
        logger.warning("Invalid REDIS_URL (%s), rate limiting disabled", e)
        return None


@lru_cache
def get_quota_gate() -> QuotaGate:
    return QuotaGate(create_store(settings.redis_url), daily_limit=settings.daily_quota)
