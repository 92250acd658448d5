import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .friendly_msg import DEFAULT_MESSAGE

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("Unhandled server error: %s", e)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "SERVER_ERROR",
                    "message": DEFAULT_MESSAGE,
                },
            )
