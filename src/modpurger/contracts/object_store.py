"""ObjectStore protocol for bucket storage backends.

This protocol defines the interface used by:
- core/storage/lister.py (ObjectLister, bounded listing)
- core/retention/purge.py (PurgeManager, deletion jobs)

Implementations must treat deleting a missing object as success so that a
purge can be re-run after a partial prior run.
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from modpurger.contracts.models import ObjectRecord


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for object storage backends."""

    def iter_objects(self, bucket: str, prefix: str) -> Iterator[ObjectRecord]:
        """Lazily iterate objects strictly under prefix.

        Args:
            bucket: Bucket name
            prefix: Key prefix

        Returns:
            Forward-only iterator of ObjectRecord
        """
        ...

    def delete(self, bucket: str, key: str, *, timeout: float) -> bool:
        """Delete one object.

        Args:
            bucket: Bucket name
            key: Object key
            timeout: Per-request ceiling in seconds

        Returns:
            True if the object was deleted, False if it was already absent

        Raises:
            Exception: Any transport or permission failure
        """
        ...
