"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    DATA_DIR,
    AppSettings,
    BindingSettings,
    LoggingSettings,
    ServerSettings,
    StorageSettings,
    SupabaseSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "BindingSettings",
    "DATA_DIR",
    "LoggingSettings",
    "ServerSettings",
    "StorageSettings",
    "SupabaseSettings",
    "get_settings",
]
