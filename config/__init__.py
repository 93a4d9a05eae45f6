"""Configuration helpers for the jackpot keeper."""

from .settings import DEFAULT_PROGRAM_ID, Settings, load_settings

__all__ = ["Settings", "load_settings", "DEFAULT_PROGRAM_ID"]
