"""File metadata store access and module cache filename codec."""

from modpurger.core.datastore.database import MetadataDB
from modpurger.core.datastore.keys import classify, is_partial
from modpurger.core.datastore.schema import FILES_SCHEMA, MARKER_FILETYPE, files_table, metadata

__all__ = [
    "FILES_SCHEMA",
    "MARKER_FILETYPE",
    "MetadataDB",
    "classify",
    "files_table",
    "is_partial",
    "metadata",
]
