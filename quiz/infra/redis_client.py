from __future__ import annotations

import redis

from quiz.config import Settings


def create_redis(settings: Settings) -> redis.Redis | None:
    if not settings.redis_url:
        return None
    # decode_responses=True => strings in/out instead of bytes; the lock tokens rely on it
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)
