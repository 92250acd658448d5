import os
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "RENTAL BACK OFFICE"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./rental.db")
    SQL_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = False
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    SECURE_COOKIES: bool = False  # must be false on localhost
    CSRF_TOKEN_EXPIRE_DAYS: int = 5
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    ALLOWED_HOSTS_RAW: str = os.getenv("ALLOWED_HOSTS", "")

    RATE_LIMIT_REDIS_URL: str = os.getenv(
        "RATE_LIMIT_REDIS_URL", "redis://localhost:6379/0"
    )
    DRAMATIQ_REDIS_URL: str = os.getenv("DRAMATIQ_REDIS_URL", "redis://localhost:6379/1")

    UPSTASH_REDIS_TOKEN: str | None = os.getenv("UPSTASH_REDIS_REST_TOKEN")
    UPSTASH_REDIS_URL: str | None = os.getenv("UPSTASH_REDIS_REST_URL")
    CACHE_TTL: int = 300

    RABBITMQ_URL: str = os.getenv("RABBITMQ_URL", "")
    RABBITMQ_MAIN_EXCHANGE: str = "rental_events"
    RABBITMQ_DLX: str = "dead_letter_exchange"
    RABBITMQ_DLX_QUEUE: str = "dead_letter_queue"

    EMAIL_USER: str | None = os.getenv("EMAIL_USER")
    EMAIL_PASSWORD: str | None = os.getenv("EMAIL_PASSWORD")
    EMAIL_SERVER: str | None = os.getenv("EMAIL_SERVER")
    EMAIL_PORT: int = 587
    EMAIL_USE_TLS: bool = True

    REMINDER_DISPATCH_MINUTES: int = 15
    SCHEDULER_ENABLED: bool = True
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    @property
    def ALLOWED_HOSTS(self) -> List[str]:
        return [h.strip() for h in self.ALLOWED_HOSTS_RAW.split(",") if h.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.EMAIL_SERVER and self.EMAIL_USER)

    class Config:
        env_file = ".env"
        extra = "ignore"
        case_sensitive = False


settings = Settings()
