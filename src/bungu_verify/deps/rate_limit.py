"""Per-client rate limiting for the endpoints that send email."""

from typing import Any

from fastapi import Depends, HTTPException, Request
from starlette import status

from ..config import Settings
from ..logging_config import get_logger
from ..metrics import RATE_LIMIT_HITS
from .providers import get_cache_from_request, get_settings

logger = get_logger(__name__)


async def enforce_rate_limit(
    request: Request, cache: Any, settings: Settings, scope: str = ""
) -> None:
    """Allow ``rate_limit_calls`` requests per ``rate_limit_period`` seconds per IP and path."""
    ip = request.client.host if request.client else "unknown"
    key = f"rl:{ip}:{request.url.path}"
    if scope:
        key = f"{key}:{scope}"

    # incr creates the key; the first hit in a window sets its TTL
    try:
        count = await cache.incr(key)
        if count == 1:
            await cache.expire(key, settings.rate_limit_period)
    except Exception as e:
        # fail open: a cache outage must not block verification
        logger.warning("rate_limit_cache_failed", key=key, error=str(e))
        count = 0

    if count > settings.rate_limit_calls:
        if RATE_LIMIT_HITS is not None:
            RATE_LIMIT_HITS.labels(endpoint=request.url.path).inc()
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many requests"
        )


async def require_rate_limit(
    request: Request,
    settings: Settings = Depends(get_settings),
    cache: Any = Depends(get_cache_from_request),
) -> None:
    """Dependency form of :func:`enforce_rate_limit` for whole routes."""
    await enforce_rate_limit(request, cache, settings)
