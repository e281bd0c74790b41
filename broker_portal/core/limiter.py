from slowapi import Limiter
from slowapi.util import get_remote_address

from broker_portal.core.settings import Settings, settings


def _storage_uri(config: Settings) -> str:
    # Test runs must not need a reachable redis.
    if config.environment == "test":
        return "memory://"
    return config.redis_url


def build_limiter(config: Settings = settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[f"{config.rate_limit_per_minute}/minute"],
        storage_uri=_storage_uri(config),
    )


limiter = build_limiter()

__all__ = ["limiter", "build_limiter"]
