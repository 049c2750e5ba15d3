"""
Production ASGI entry point.

Usage:
    uvicorn marketplace_chat.main:app --host 0.0.0.0 --port 5001
"""

from marketplace_chat.app import create_app
from marketplace_chat.config.logging_config import setup_logging
from marketplace_chat.config.settings import get_config
from marketplace_chat.setup.ioc.container import create_container

settings = get_config()
setup_logging(settings.LOG_LEVEL, settings.LOG_PATH)

# Create the app instance
app = create_app(create_container())
