# tests/fixtures/metadata.py
"""Metadata store fixtures.

All fixtures are function-scoped for full test isolation.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from modpurger.core.datastore.database import MetadataDB
from modpurger.core.datastore.schema import files_table


def make_metadata_db() -> MetadataDB:
    """Factory for in-memory MetadataDB."""
    return MetadataDB.in_memory()


def insert_file(
    db: MetadataDB,
    *,
    bucket: str = "substreams-cache",
    network: str = "eth-mainnet",
    subfolder: str,
    filename: str = "0000000000-0000001000.output.zst",
    created_at: datetime,
    filetype: int = 0,
    size: int = 1024,
    deleted_at: datetime | None = None,
) -> None:
    with db.connection() as conn:
        conn.execute(
            files_table.insert().values(
                bucket=bucket,
                network=network,
                subfolder=subfolder,
                filename=filename,
                filetype=filetype,
                size=size,
                created_at=created_at,
                deleted_at=deleted_at,
            )
        )


@pytest.fixture
def metadata_db() -> MetadataDB:
    """Function-scoped in-memory MetadataDB - fresh per test."""
    return make_metadata_db()
