"""
통계 응답 캐시 (fastapi-cache)
"""
import logging
import os

import redis.asyncio as redis
from fastapi_cache import FastAPICache
from fastapi_cache.backends.inmemory import InMemoryBackend
from fastapi_cache.backends.redis import RedisBackend
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

STATS_NAMESPACE = "stats"


def init_cache():
    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        try:
            r = redis.from_url(redis_url, encoding="utf8", decode_responses=True)
            FastAPICache.init(RedisBackend(r), prefix="tracker-cache")
            logger.info("FastAPICache initialized with Redis")
            return
        except Exception as e:
            logger.error(f"Failed to connect to Redis, falling back to InMemory: {e}")
    FastAPICache.init(InMemoryBackend(), prefix="tracker-cache")
    logger.info("FastAPICache initialized with InMemoryBackend")


def stats_key_builder(func, namespace: str = "", *, request=None, response=None, args=None, kwargs=None):
    # 요청마다 새로 생기는 DB 세션이 키에 섞이지 않도록 함수 이름만 사용
    return f"{namespace}:{func.__module__}:{func.__name__}"


async def invalidate_stats():
    """프로젝트가 생성/변경되면 통계 캐시를 비운다.

    쓰기는 이미 커밋된 뒤이므로 캐시 백엔드 오류는 로그만 남기고 삼킨다.
    """
    try:
        await FastAPICache.clear(namespace=STATS_NAMESPACE)
    except RedisError as e:
        logger.error(f"Failed to clear stats cache: {e}")
