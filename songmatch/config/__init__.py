"""Configuration module - exports Settings and load_settings."""

from songmatch.config.loader import load_settings
from songmatch.config.settings import Settings

__all__ = ["Settings", "load_settings"]
