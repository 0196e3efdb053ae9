"""Configuration for the logq CLI."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
