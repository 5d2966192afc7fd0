from redis.asyncio import Redis

from .config import get_settings

settings = get_settings()

redis = Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=settings.redis_socket_timeout,
    socket_connect_timeout=settings.redis_socket_timeout,
    health_check_interval=30,
)
