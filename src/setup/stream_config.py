from pydantic import ConfigDict
from pydantic_settings import BaseSettings
from redis.asyncio import Redis

from src.taskboard.infrastructure.streams.feed import StreamsChangeFeed


class StreamSettings(BaseSettings):
    """Configuration for the Redis Streams change feed."""
    REDIS_URL: str = "redis://redis:6379/0"
    STREAM_PREFIX: str = "tasks"
    BLOCK_MS: int = 5000
    STREAM_MAXLEN: int | None = 1000
    MAX_CONNECTIONS: int = 10
    CONNECT_TIMEOUT_SEC: float = 5.0

    model_config = ConfigDict(env_file=".env", extra="ignore")


def get_stream_settings() -> StreamSettings:
    return StreamSettings()


def build_change_feed(settings: StreamSettings | None = None) -> StreamsChangeFeed:
    """Create a change feed bound to a fresh Redis connection pool."""
    if settings is None:
        settings = get_stream_settings()
    # No read timeout: subscriptions park in blocking XREAD calls.
    redis = Redis.from_url(
        settings.REDIS_URL,
        max_connections=settings.MAX_CONNECTIONS,
        socket_connect_timeout=settings.CONNECT_TIMEOUT_SEC,
        retry_on_timeout=True,
        decode_responses=True,
    )
    return StreamsChangeFeed(
        redis,
        prefix=settings.STREAM_PREFIX,
        block_ms=settings.BLOCK_MS,
        maxlen=settings.STREAM_MAXLEN,
    )
