# src/modpurger/core/__init__.py
"""Core infrastructure: metadata store, storage, retention, pooling, configuration, logging."""

from modpurger.core.config import (
    DatabaseSettings,
    PoolSettings,
    PurgerSettings,
    RetentionSettings,
    StorageSettings,
    load_settings,
)
from modpurger.core.logging import configure_logging, get_logger

__all__ = [
    "DatabaseSettings",
    "PoolSettings",
    "PurgerSettings",
    "RetentionSettings",
    "StorageSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
