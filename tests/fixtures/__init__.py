# tests/fixtures/__init__.py
"""Shared pytest fixtures for modpurger tests.

Available fixtures:
- metadata_db: in-memory SQLite metadata store
"""

from tests.fixtures.metadata import metadata_db

__all__ = [
    "metadata_db",
]
