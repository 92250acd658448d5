import logging

from fastapi import Depends, Request, Response
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from redis.asyncio import from_url

from .settings import settings

logger = logging.getLogger(__name__)


class RateLimitManager:
    def __init__(self):
        self.redis = None
        self.ready = False

    async def connect(self):
        self.redis = from_url(
            settings.RATE_LIMIT_REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await FastAPILimiter.init(self.redis)
        except Exception:
            FastAPILimiter.redis = None
            self.redis = None
            raise
        self.ready = True
        logger.info("Rate limiter initialized.")

    async def close(self):
        if self.ready:
            await FastAPILimiter.close()
            self.ready = False

    @staticmethod
    async def limit_exceeded_handler(request: Request, exc):
        return JSONResponse(
            status_code=429,
            content={
                "success": False,
                "error": "RATE_LIMITED",
                "message": "Limit exceeded. Please try again later.",
            },
        )

    async def user_or_ip(self, request: Request) -> str:
        user = getattr(request.state, "user", None)
        user_id = getattr(user, "id", None)
        if user_id is not None:
            return f"user:{user_id}"
        if request.client and request.client.host:
            return f"ip:{request.client.host}:{request.scope['path']}"
        return "anonymous"


rate_limiter_manager = RateLimitManager()
rate_limiter = RateLimiter(times=20, seconds=10, identifier=rate_limiter_manager.user_or_ip)


async def throttle(request: Request, response: Response):
    # requests pass unthrottled until redis is reachable
    if not rate_limiter_manager.ready:
        return
    await rate_limiter(request, response)


rate_limit = Depends(throttle)
