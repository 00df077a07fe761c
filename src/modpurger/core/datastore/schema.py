# src/modpurger/core/datastore/schema.py
"""SQLAlchemy table definitions for the file metadata store.

Uses SQLAlchemy Core (not ORM) for explicit control over queries. The
store is owned by the cost estimator, which records every module cache
file it observes in the buckets; this engine only reads it.
"""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
)

# Schema the production tables live in. SQLite has no schemas, so
# MetadataDB maps it away for local databases.
FILES_SCHEMA = "cost_estimator"

# filetype value the cost estimator uses for marker/manifest files. These
# are bookkeeping entries, never purge targets, and never count towards a
# module's youngest file.
MARKER_FILETYPE = 1

metadata = MetaData()

files_table = Table(
    "files",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("bucket", String(256), nullable=False),
    Column("network", String(128), nullable=False),
    Column("subfolder", String(1024), nullable=False),
    Column("filename", String(512), nullable=False),
    Column("filetype", Integer, nullable=False),
    Column("size", BigInteger, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("deleted_at", DateTime(timezone=True)),
    Index("ix_files_module", "bucket", "network", "subfolder"),
    schema=FILES_SCHEMA,
)
