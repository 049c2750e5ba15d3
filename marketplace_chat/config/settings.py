"""Application configuration settings"""

import os
from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


class Config:
    # App settings
    APP_NAME = os.getenv("APP_NAME", "marketplace-chat")
    TESTING = os.getenv("TESTING", "false").lower() in _TRUTHY
    DEBUG = os.getenv("DEBUG", "false").lower() in _TRUTHY

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH", "") or None
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s",
    )

    # Auth (tokens are issued by the platform's auth service, we only verify them)
    SERVICE_AUTH_SECRET = os.getenv("SERVICE_AUTH_SECRET", "")
    SERVICE_AUTH_ISSUER = os.getenv("SERVICE_AUTH_ISSUER", "your_service_name")
    SERVICE_AUTH_AUDIENCE = os.getenv("SERVICE_AUTH_AUDIENCE", "your_service_audience")

    # Postgresql Database settings (Prisma reads DATABASE_URL itself)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Change feed (LISTEN/NOTIFY channel populated by prisma/sql/row_change_feed.sql)
    CHANGE_FEED_CHANNEL: str = os.getenv("CHANGE_FEED_CHANNEL", "row_changes")
    CHANGE_FEED_RECONNECT_SECONDS: float = float(
        os.getenv("CHANGE_FEED_RECONNECT_SECONDS", "2.0")
    )
    # Events buffered per subscriber before it is resynced instead
    CHANGE_FEED_QUEUE_SIZE: int = int(os.getenv("CHANGE_FEED_QUEUE_SIZE", "256"))

    # Redis settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    PRESENCE_TTL_SECONDS: int = int(os.getenv("PRESENCE_TTL_SECONDS", "90"))
    PUSH_OUTBOX_TTL_SECONDS: int = int(os.getenv("PUSH_OUTBOX_TTL_SECONDS", "86400"))

    # Object storage (Supabase Storage, private bucket)
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_KEY: str = os.getenv("SUPABASE_SERVICE_KEY", "")
    ATTACHMENT_BUCKET: str = os.getenv("ATTACHMENT_BUCKET", "chat-attachments")
    MAX_ATTACHMENT_MB: float = float(os.getenv("MAX_ATTACHMENT_MB", "5"))
    SIGNED_URL_TTL_SECONDS: int = int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600"))

    # Messaging
    MESSAGE_MAX_LENGTH: int = int(os.getenv("MESSAGE_MAX_LENGTH", "5000"))
    COVER_MESSAGE_MAX_LENGTH: int = int(os.getenv("COVER_MESSAGE_MAX_LENGTH", "1000"))
    NOTIFICATION_LIST_LIMIT: int = int(os.getenv("NOTIFICATION_LIST_LIMIT", "20"))
    NOTIFICATION_LIST_MAX: int = int(os.getenv("NOTIFICATION_LIST_MAX", "50"))
    NOTIFICATION_PREVIEW_LENGTH: int = int(
        os.getenv("NOTIFICATION_PREVIEW_LENGTH", "100")
    )

    # Retries for idempotent reads (list, signed url)
    READ_RETRY_ATTEMPTS: int = int(os.getenv("READ_RETRY_ATTEMPTS", "3"))
    READ_RETRY_MAX_WAIT: float = float(os.getenv("READ_RETRY_MAX_WAIT", "2.0"))


class DevelopmentConfig(Config):
    """Development configuration"""

    DEBUG = True


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    READ_RETRY_MAX_WAIT = 0.0


class ProductionConfig(Config):
    """Production configuration"""

    pass


# Configuration dictionary
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env=None):
    """Get configuration based on environment"""
    if env is None:
        env = os.getenv("APP_ENV", "development")
    return config.get(env, config["default"])
