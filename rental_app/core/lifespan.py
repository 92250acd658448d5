import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .cache import cache
from .get_db import Base, async_engine
from .rabbitmq import rabbitmq
from .settings import settings
from .throttling import rate_limiter_manager

logger = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Waiting for application startup...")

    if settings.AUTO_CREATE_TABLES:
        try:
            import models.models  # noqa: F401

            async with async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables ensured.")
        except Exception:
            logger.exception("Failed to create database tables")

    if rabbitmq.configured:
        try:
            await rabbitmq.connect()
            await rabbitmq.declare_exchange_with_dlq(settings.RABBITMQ_MAIN_EXCHANGE)
            logger.info("RabbitMQ connected.")
        except Exception:
            logger.exception("RabbitMQ connection failed")

    try:
        await cache.connect()
    except Exception:
        logger.exception("Upstash Redis connection failed")

    try:
        await rate_limiter_manager.connect()
        logger.info("Rate limiter connected.")
    except Exception:
        logger.exception("Rate limiter connection failed; requests are not throttled")

    logger.info("Application startup complete.")

    yield

    try:
        await rabbitmq.close()
    except Exception:
        logger.exception("Failed to close RabbitMQ connection")

    try:
        await rate_limiter_manager.close()
    except Exception:
        logger.exception("Failed to close rate limiter")

    await async_engine.dispose()
