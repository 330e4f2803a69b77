from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.config import settings
from loguru import logger

# ----------------------------------------------------------------
# 1. CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Identifies the client IP behind a reverse proxy.
    Checks X-Forwarded-For first, then X-Real-IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Leftmost entry is the original client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)

# ----------------------------------------------------------------
# 2. INITIALIZE LIMITER
# ----------------------------------------------------------------
storage_uri = settings.REDIS_URL

if storage_uri:
    logger.info("⚡ Initializing Rate Limiter with Redis Storage")
    limiter = Limiter(
        key_func=get_real_ip,
        storage_uri=storage_uri,
        strategy="fixed-window",
        storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
        enabled=settings.RATE_LIMIT_ENABLED,
    )
else:
    logger.info("REDIS_URL not set. Using in-memory rate limiting.")
    limiter = Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)
