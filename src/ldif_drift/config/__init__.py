"""Configuration."""

from .settings import ConfigurationError, Settings, Thresholds

__all__ = ["ConfigurationError", "Settings", "Thresholds"]
