"""Configuration module for serpbot."""

from serpbot.config.loader import get_config_path, load_config
from serpbot.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
