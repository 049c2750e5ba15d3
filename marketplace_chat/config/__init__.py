"""Configuration: environment settings and logging setup."""

from marketplace_chat.config.settings import Config, get_config

__all__ = ["Config", "get_config"]
