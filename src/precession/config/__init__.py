"""Configuration management module."""

from .loader import PrecessionConfig, find_config_file, load_config

__all__ = ["PrecessionConfig", "load_config", "find_config_file"]
