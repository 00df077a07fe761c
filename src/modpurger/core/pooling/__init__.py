# src/modpurger/core/pooling/__init__.py
"""Bounded-concurrency deletion pool."""

from modpurger.core.pooling.config import PoolConfig
from modpurger.core.pooling.executor import DELETE_ATTEMPTS, DeleteFn, DeletionPool

__all__ = [
    "DELETE_ATTEMPTS",
    "DeleteFn",
    "DeletionPool",
    "PoolConfig",
]
