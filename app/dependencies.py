import logging
import time

from fastapi import HTTPException, Request, status

from app.core.config import settings
from app.managers.redis_manager import redis_manager

logger = logging.getLogger(__name__)


def client_identity(request: Request) -> str:
    """
    Address used to key the rate limit.

    Walks ``X-Forwarded-For`` from the right, skipping one entry per trusted
    proxy, so only addresses appended by those proxies are believed.
    """
    peer = request.client.host if request.client else "unknown"
    hops = settings.TRUSTED_PROXY_HOPS
    if hops <= 0:
        return peer

    forwarded = request.headers.get("x-forwarded-for", "")
    chain = [peer] + [part.strip() for part in reversed(forwarded.split(",")) if part.strip()]
    return chain[min(hops, len(chain) - 1)]


async def rate_limit(request: Request):
    """
    Fixed-window rate limit per client, shared by every route.

    When Redis is unreachable the request is let through.
    """
    if not settings.RATE_LIMIT_ENABLED:
        return

    window = settings.RATE_LIMIT_WINDOW_SECONDS
    window_index = int(time.time() // window)
    key = f"{settings.RATE_LIMIT_KEY_PREFIX}{client_identity(request)}:{window_index}"

    try:
        count = await redis_manager.hit(key, window)
    except Exception as e:
        logger.warning(f"Rate limiter unavailable, allowing request: {e}")
        return

    if count > settings.RATE_LIMIT_MAX_REQUESTS:
        retry_after = window - int(time.time() % window)
        logger.warning(f"Rate limit exceeded for {client_identity(request)} ({count} requests)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later.",
            headers={"Retry-After": str(retry_after)},
        )
