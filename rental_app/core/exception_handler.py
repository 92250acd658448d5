from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ValidationErrorHandler:
    async def __call__(self, request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            errors.append(
                {
                    "loc": err.get("loc"),
                    "msg": str(err.get("msg")),
                    "type": err.get("type"),
                }
            )

        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Validation failed",
                "details": errors,
            },
        )


class RentalErrorHandler:
    async def __call__(self, request: Request, exc: HTTPException):
        code = getattr(exc, "code", None) or _code_for_status(exc.status_code)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": code, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )


def _code_for_status(status_code: int) -> str:
    return {
        400: "BAD_REQUEST",
        401: "NOT_AUTHENTICATED",
        403: "NOT_AUTHORIZED",
        404: "NOT_FOUND",
        409: "CONFLICT",
        429: "RATE_LIMITED",
    }.get(status_code, "SERVER_ERROR" if status_code >= 500 else "ERROR")
