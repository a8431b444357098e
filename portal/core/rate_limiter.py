# portal/core/rate_limiter.py

from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from portal.core.config import settings


# ----------------------------------------------------------------
# 1. CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Client IP behind proxies: X-Forwarded-For (leftmost), then X-Real-IP,
    then the socket address.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# 2. STORAGE URI (managed Redis usually needs TLS)
# ----------------------------------------------------------------
storage_uri = settings.REDIS_URL

if storage_uri and storage_uri.startswith("redis://") and settings.ENV == "prod":
    storage_uri = storage_uri.replace("redis://", "rediss://", 1)


# ----------------------------------------------------------------
# 3. LIMITER (falls back to in-memory storage)
# ----------------------------------------------------------------
try:
    if storage_uri:
        logger.info("Initializing rate limiter with Redis storage")
        limiter = Limiter(
            key_func=get_real_ip,
            storage_uri=storage_uri,
            strategy="fixed-window",
            storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
            enabled=settings.RATE_LIMIT_ENABLED,
        )
    else:
        logger.warning("REDIS_URL not set. Using in-memory rate limiting.")
        limiter = Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)

except Exception as e:
    logger.error(f"Failed to configure Redis rate limiting: {e}")
    limiter = Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)
