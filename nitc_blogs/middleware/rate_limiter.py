"""
NITC Blogs — Sliding window rate limiter middleware (Redis-backed)

Limits login attempts per email inside a rolling window.
Uses sorted sets (ZADD/ZREMRANGEBYSCORE/ZCARD) for a true sliding window.
"""
import json
import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "ratelimit:login:"
LOGIN_PATHS = ("/api/v1/users/login", "/api/v1/users/login/")


class SlidingWindowRateLimiter(BaseHTTPMiddleware):
    """
    Applies sliding-window rate limiting ONLY to POST /api/v1/users/login.
    Key is derived from the email in the request body, falling back to the
    client IP when the body cannot be parsed.
    """

    def __init__(self, app, max_attempts: int, window_seconds: int):
        super().__init__(app)
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        redis = getattr(request.app.state, "redis", None)
        if redis is None or request.method != "POST" or request.url.path not in LOGIN_PATHS:
            return await call_next(request)

        body = await request.body()
        client_host = request.client.host if request.client else "unknown"
        try:
            data = json.loads(body)
            tracking_key = str(data.get("email") or "").strip().lower() or client_host
        except (ValueError, AttributeError):
            tracking_key = client_host

        key = f"{RATE_LIMIT_PREFIX}{tracking_key}"
        now = time.time()
        window_start = now - self.window_seconds

        pipe = redis.pipeline()
        pipe.zremrangebyscore(key, "-inf", window_start)
        pipe.zcard(key)
        pipe.zadd(key, {str(now): now})
        pipe.expire(key, self.window_seconds + 1)
        try:
            results = await pipe.execute()
        except RedisError as exc:
            # Fail open.
            logger.warning("Login rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        attempt_count = results[1]  # count before this attempt
        if attempt_count >= self.max_attempts:
            return JSONResponse(
                status_code=429,
                content={
                    "status": "fail",
                    "message": (
                        f"Too many login attempts. Maximum {self.max_attempts} "
                        f"attempts per {self.window_seconds} seconds."
                    ),
                },
                headers={"Retry-After": str(self.window_seconds)},
            )

        # Starlette replays the cached body to the downstream app
        return await call_next(request)
