import logging
from datetime import datetime, timezone

from .rabbitmq import rabbitmq
from .settings import settings

logger = logging.getLogger(__name__)


async def publish_event(event_name: str, data: dict) -> None:
    """Best-effort domain event publish; failures are logged and swallowed."""
    if not rabbitmq.configured:
        logger.debug("RabbitMQ not configured; dropping event %s", event_name)
        return
    payload = {**data, "timestamp": datetime.now(timezone.utc).isoformat()}
    try:
        await rabbitmq.publish_json(
            exchange_name=settings.RABBITMQ_MAIN_EXCHANGE,
            routing_key=event_name,
            data=payload,
        )
    except Exception as e:
        logger.warning("Failed to publish event %s: %s", event_name, e)
