"""Configuration module for scenetq settings and defaults."""

from .config import SearchConfig
from . import default_config

__all__ = ["SearchConfig", "default_config"]
