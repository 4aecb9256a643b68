"""Application-level wiring: configuration."""

from .config import ClientSettings, load_settings

__all__ = ["ClientSettings", "load_settings"]
