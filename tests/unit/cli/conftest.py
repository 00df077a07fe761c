"""Fixtures for CLI command tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import structlog

from modpurger.core.datastore import MetadataDB
from tests.fixtures.metadata import insert_file
from tests.fixtures.stores import MemoryObjectStore

BUCKET = "substreams-cache"
MODULE_AGE = timedelta(days=90)


@pytest.fixture(autouse=True)
def _isolate_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run each command from an empty directory and undo its logging setup."""
    monkeypatch.chdir(tmp_path)
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers = []


@pytest.fixture
def cli_store(monkeypatch: pytest.MonkeyPatch) -> MemoryObjectStore:
    """MemoryObjectStore returned by the CLI in place of the GCS backend."""
    store = MemoryObjectStore()
    monkeypatch.setattr("modpurger.cli._create_object_store", lambda config, billing_project: store)
    return store


@pytest.fixture
def module_boundary() -> datetime:
    return (datetime.now(UTC) - MODULE_AGE).replace(microsecond=0)


@pytest.fixture
def database_url(tmp_path: Path, module_boundary: datetime) -> str:
    """SQLite metadata DB holding one stale module (eth-mainnet mod/states)."""
    url = f"sqlite:///{tmp_path / 'metadata.db'}"
    with MetadataDB(url, create_tables=True) as db:
        insert_file(db, bucket=BUCKET, subfolder="mod/states", created_at=module_boundary - timedelta(days=1))
        insert_file(db, bucket=BUCKET, subfolder="mod/states", created_at=module_boundary)
        insert_file(
            db,
            bucket=BUCKET,
            subfolder="mod/fresh",
            created_at=datetime.now(UTC) - timedelta(days=1),
        )
    return url
