"""Configuration models for swiftgraft."""

from .config import CONFIG_FILE_NAME, Config, find_config_file
from .generation_config import GenerationConfig

__all__ = ["CONFIG_FILE_NAME", "Config", "GenerationConfig", "find_config_file"]
