import logging

import dramatiq
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import AgeLimit, AsyncIO, Callbacks, Retries, TimeLimit

from core.settings import settings
from dramatiq_tasks.rent_reminders import (
    create_overdue_payment_task,
    create_reminder_dispatch_task,
)

logger = logging.getLogger(__name__)


class DramatiqManager:
    def __init__(self, redis_url: str = settings.DRAMATIQ_REDIS_URL):
        self.REDIS_URL = redis_url

        self.broker = RedisBroker(url=self.REDIS_URL)
        self.broker.add_middleware(AgeLimit(max_age=3600000))
        self.broker.add_middleware(TimeLimit(time_limit=600000))
        self.broker.add_middleware(Retries(max_retries=5))
        self.broker.add_middleware(Callbacks())
        self.broker.add_middleware(AsyncIO())

        dramatiq.set_broker(self.broker)

        self._register_tasks()

        self.scheduler = BackgroundScheduler(timezone="UTC")
        self._register_cron_jobs()

    def _register_tasks(self):
        create_reminder_dispatch_task()
        create_overdue_payment_task()

    def _register_cron_jobs(self):
        self.scheduler.add_job(
            func=lambda: self.delay("dispatch_rent_reminders"),
            trigger=CronTrigger(minute=f"*/{settings.REMINDER_DISPATCH_MINUTES}"),
            id="dispatch-rent-reminders",
            replace_existing=True,
        )

        self.scheduler.add_job(
            func=lambda: self.delay("mark_overdue_rent_payments"),
            trigger=CronTrigger(hour=0, minute=30),
            id="mark-overdue-rent-payments-daily",
            replace_existing=True,
        )

    def start_scheduler(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Rent job scheduler started.")

    def connect(self):
        logger.info("Connecting to Dramatiq broker: %s", self.REDIS_URL)
        try:
            self.broker.client.ping()
            logger.info("Dramatiq connected successfully.")
        except Exception:
            logger.exception("Dramatiq connection failed")

    def delay(self, actor_name: str, *args, **kwargs):
        actor = self.broker.get_actor(actor_name)
        return actor.send(*args, **kwargs)


dramatiq_app = DramatiqManager()

if settings.SCHEDULER_ENABLED:
    dramatiq_app.start_scheduler()
