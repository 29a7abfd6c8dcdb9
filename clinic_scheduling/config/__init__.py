from clinic_scheduling.config.redis import RedisConfig, get_redis_config
from clinic_scheduling.config.settings import Settings, get_settings

__all__ = [
    "RedisConfig",
    "Settings",
    "get_redis_config",
    "get_settings",
]
