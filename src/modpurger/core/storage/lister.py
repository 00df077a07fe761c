# src/modpurger/core/storage/lister.py
"""Bounded listing of objects under a prefix.

Listing a large module cache can take hours. The lister enforces a
wall-clock ceiling over the whole pass and reports an overrun as an error
rather than returning a truncated listing: a truncated listing would make
a partial deletion set look complete.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from modpurger.contracts.errors import ListingError, ListingTimeoutError, PurgeError
from modpurger.contracts.models import ObjectRecord
from modpurger.contracts.object_store import ObjectStore
from modpurger.core.logging import get_logger

logger = get_logger(__name__)

# Ceiling for one listing pass
DEFAULT_LIST_TIMEOUT_SECONDS = 6 * 60 * 60


class ObjectLister:
    """Enumerates objects under a prefix with a wall-clock ceiling."""

    def __init__(
        self,
        store: ObjectStore,
        *,
        timeout_seconds: float = DEFAULT_LIST_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize ObjectLister.

        Args:
            store: Object storage backend
            timeout_seconds: Ceiling for one listing pass
            clock: Monotonic clock, injectable for tests
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._store = store
        self._timeout_seconds = timeout_seconds
        self._clock = clock

    def list(
        self,
        bucket: str,
        prefix: str,
        on_each: Callable[[ObjectRecord], None],
        limit: int | None = None,
    ) -> int:
        """Invoke on_each for every object under prefix.

        Args:
            bucket: Bucket name
            prefix: Key prefix
            on_each: Called once per object, in listing order
            limit: Stop after this many objects (None means unbounded)

        Returns:
            Number of objects passed to on_each

        Raises:
            ListingTimeoutError: If the pass exceeds the ceiling
            ListingError: If the backend fails while listing
        """
        logger.info("listing_started", bucket=bucket, prefix=prefix, limit=limit)
        deadline = self._clock() + self._timeout_seconds
        count = 0
        try:
            for record in self._store.iter_objects(bucket, prefix):
                if limit is not None and count >= limit:
                    break
                if self._clock() > deadline:
                    raise ListingTimeoutError(bucket, prefix, self._timeout_seconds, count)
                on_each(record)
                count += 1
        except PurgeError:
            # Raised by on_each (consistency checks) or the timeout above
            raise
        except Exception as e:
            raise ListingError(bucket, prefix, str(e)) from e

        logger.info("listing_completed", bucket=bucket, prefix=prefix, listed=count)
        return count
