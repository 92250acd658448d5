import logging

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.exception_handler import RentalErrorHandler, ValidationErrorHandler
from core.get_csrfToken import csrf_router
from core.lifespan import lifespan
from core.settings import settings
from core.throttling import rate_limiter_manager
from routes.house_routes import router as house_router
from routes.lease_routes import router as lease_router
from routes.maintenance_routes import router as maintenance_router
from routes.notification_routes import router as notification_router
from routes.rent_payment_routes import router as rent_payment_router
from routes.rent_reminder_routes import router as rent_reminder_router
from routes.rent_request_routes import router as rent_request_router

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    exception_handlers={429: rate_limiter_manager.limit_exceeded_handler},
    version="1.0.0",
)

app.include_router(csrf_router, prefix="/v1")
app.include_router(house_router, prefix="/v1/houses")
app.include_router(rent_request_router, prefix="/v1/rent-requests")
app.include_router(lease_router, prefix="/v1/leases")
app.include_router(rent_payment_router, prefix="/v1/rent-payments")
app.include_router(rent_reminder_router, prefix="/v1/rent-reminders")
app.include_router(maintenance_router, prefix="/v1/maintenance-requests")
app.include_router(notification_router, prefix="/v1/notifications")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}


app.add_exception_handler(RequestValidationError, ValidationErrorHandler())
app.add_exception_handler(HTTPException, RentalErrorHandler())

app.add_middleware(ErrorHandlerMiddleware)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
)


if __name__ == "__main__":
    uvicorn.run("app:app", host="127.0.0.1", port=8001, reload=True)
