"""
Rate limiting for API protection.

Uses slowapi to limit requests per client IP, so one client cannot starve
others of feed refreshes or summary generation.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import config


def get_rate_limit() -> str:
    """Get rate limit from config."""
    return f"{max(config.RATE_LIMIT_PER_MINUTE, 1)}/minute"


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[get_rate_limit()],
    storage_uri="memory://",
    # Zero or less disables limiting
    enabled=config.RATE_LIMIT_PER_MINUTE > 0,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 with a Retry-After hint."""
    retry_after = getattr(exc, "retry_after", 60)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}", "retry_after": retry_after},
        headers={"Retry-After": str(retry_after)},
    )


def setup_rate_limiting(app: FastAPI):
    """Attach the limiter, its middleware and the 429 handler to an app."""
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
