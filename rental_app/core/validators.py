import uuid

import jwt
from fastapi import Request, status

from .exceptions import AuthenticationError, RentalError
from .settings import settings


class CSRFError(RentalError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "CSRF_FAILED"
    default_detail = "Missing CSRF token"


def decode_http_access_token(token: str) -> uuid.UUID:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    user_id = payload.get("sub")
    if not user_id:
        raise jwt.InvalidTokenError("Token missing user ID")
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        raise jwt.InvalidTokenError("Invalid user ID format in token")


async def jwt_protect(request: Request) -> uuid.UUID:
    token = request.cookies.get("access_token")
    if not token:
        auth = request.headers.get("Authorization", "")
        if auth.lower().startswith("bearer "):
            token = auth[7:]
    if not token:
        raise AuthenticationError("Not authenticated")

    try:
        return decode_http_access_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


async def validate_csrf(request: Request):
    session_token = request.session.get("csrf_token")
    cookie_token = request.cookies.get("csrf_token")

    if not (session_token and cookie_token):
        raise CSRFError("Missing CSRF token")

    if session_token != cookie_token:
        raise CSRFError("Invalid CSRF token: mismatch with session token.")

    return True


async def validate_csrf_dependency(request: Request):
    if request.method in {"GET", "HEAD", "OPTIONS"}:
        return
    if any(path in str(request.url) for path in ["/docs", "/openapi.json", "/redoc"]):
        return
    await validate_csrf(request)
