"""Configuration package exports."""

from .loader import config_path, get_configuration
from .model import BotConfig
from .repository import ConfigRepository

__all__ = [
    "BotConfig",
    "ConfigRepository",
    "config_path",
    "get_configuration",
]
