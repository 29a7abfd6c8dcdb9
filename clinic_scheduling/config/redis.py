"""
Redis Configuration

Provides Redis configuration and the async client used by the
availability cache.
"""

from dataclasses import dataclass

from redis.asyncio import Redis

from clinic_scheduling.config.settings import Settings, get_settings


@dataclass
class RedisConfig:
    """Redis configuration settings."""

    host: str
    port: int
    db: int
    password: str | None

    @property
    def url(self) -> str:
        """Build Redis URL."""
        if self.password:
            return f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"

    @property
    def connection_params(self) -> dict:
        """Get connection parameters for redis-py."""
        params = {
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "decode_responses": True,
        }
        if self.password:
            params["password"] = self.password
        return params

    def create_client(self) -> Redis:
        """Create an asyncio Redis client (connects lazily)."""
        return Redis(**self.connection_params)


def get_redis_config(settings: Settings | None = None) -> RedisConfig:
    """Get Redis configuration from settings."""
    settings = settings or get_settings()
    return RedisConfig(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
    )


__all__ = [
    "RedisConfig",
    "get_redis_config",
]
