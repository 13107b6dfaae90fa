from shared.database.postgres import AsyncSessionFactory, Base, get_async_engine, get_session
from shared.database.redis_client import get_redis_client, RedisClient

__all__ = [
    "AsyncSessionFactory",
    "Base",
    "get_async_engine",
    "get_session",
    "get_redis_client",
    "RedisClient",
]
