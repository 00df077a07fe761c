"""Exception hierarchy for purge runs.

Fatal errors (resolution, listing, consistency) propagate to the top-level
run and abort it. ClassificationError is local: the object is excluded and
the run continues.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modpurger.contracts.models import PurgeTarget


class PurgeError(Exception):
    """Base class for all purge engine errors."""


class ConfigurationError(PurgeError):
    """A required parameter is missing or invalid. The run never starts."""


class ResolutionError(PurgeError):
    """Metadata query failed. Raised before any deletion takes place."""


class ClassificationError(PurgeError):
    """Object key does not follow the module cache filename encoding."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"invalid file name {key!r}: {reason}")
        self.key = key
        self.reason = reason


class ListingError(PurgeError):
    """Enumerating objects under a prefix failed."""

    def __init__(self, bucket: str, prefix: str, message: str) -> None:
        super().__init__(f"listing gs://{bucket}/{prefix}: {message}")
        self.bucket = bucket
        self.prefix = prefix


class ListingTimeoutError(ListingError):
    """Listing exceeded its wall-clock ceiling and was abandoned."""

    def __init__(self, bucket: str, prefix: str, timeout_seconds: float, listed: int) -> None:
        super().__init__(bucket, prefix, f"abandoned after {timeout_seconds:.0f}s ({listed} objects listed)")
        self.timeout_seconds = timeout_seconds
        self.listed = listed


class ConsistencyViolationError(PurgeError):
    """A listed object is newer than the target's retention boundary.

    The boundary comes from authoritative metadata. An object newer than it
    means the metadata cannot be trusted, so the whole run stops.
    """

    def __init__(self, target: PurgeTarget, key: str, created_at: datetime) -> None:
        super().__init__(
            f"file {key!r} ({created_at.isoformat()}) is newer than module {target} "
            f"({target.retention_boundary.isoformat()})"
        )
        self.target = target
        self.key = key
        self.created_at = created_at
