"""Configuration models and parser for bot-typist.yaml."""

from bot_typist.config.models import BotTypistConfig, LLMConfig
from bot_typist.config.parser import ConfigError, load_config

__all__ = [
    "BotTypistConfig",
    "ConfigError",
    "LLMConfig",
    "load_config",
]
