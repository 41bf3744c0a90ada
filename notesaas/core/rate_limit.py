"""
Fixed-window rate limiting for the public auth, signup and invite routes.
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from notesaas.config import settings
from notesaas.core.cache import cache_manager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    requests: int
    window: int  # seconds
    scope: str


@dataclass(frozen=True)
class RateLimitStatus:
    limit: int
    remaining: int
    reset: int


RATE_LIMITS = {
    "default": RateLimitRule(requests=60, window=60, scope="rl"),
    "auth": RateLimitRule(requests=5, window=60, scope="rl_auth"),
    "signup": RateLimitRule(requests=10, window=60, scope="rl_signup"),
    "invite": RateLimitRule(requests=20, window=60, scope="rl_invite"),
}


async def check_rate_limit(identifier: str, limit_type: str = "default") -> RateLimitStatus:
    """
    Record a request from ``identifier`` and enforce the tier's limit.

    Fails open: if Redis cannot be reached the request is allowed.

    Raises:
        HTTPException: 429 with ``Retry-After`` once the window is used up
    """
    rule = RATE_LIMITS.get(limit_type, RATE_LIMITS["default"])

    try:
        count, reset = await cache_manager.hit(cache_manager.key(rule.scope, identifier), rule.window)
    except Exception as e:
        logger.error(f"Rate limit check failed, allowing request: {e}")
        return RateLimitStatus(limit=rule.requests, remaining=rule.requests, reset=0)

    if count > rule.requests:
        logger.warning(f"Rate limit exceeded: {identifier} ({limit_type}) {count}/{rule.requests}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
            headers={
                "X-RateLimit-Limit": str(rule.requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(reset),
                "Retry-After": str(reset),
            },
        )

    return RateLimitStatus(limit=rule.requests, remaining=rule.requests - count, reset=reset)


def rate_limit(limit_type: str = "default"):
    """
    Dependency factory keyed on the client address.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("auth"))])
    """
    async def dependency(request: Request) -> RateLimitStatus | None:
        if not settings.rate_limit_enabled:
            return None
        client_host = request.client.host if request.client else "unknown"
        return await check_rate_limit(client_host, limit_type)

    return dependency
