"""Value types flowing through a purge run.

All types are frozen: a PurgeTarget is built once per resolver row, an
ObjectRecord once per listed object, and neither changes afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from modpurger.contracts.enums import ArtifactKind


@dataclass(frozen=True, slots=True)
class PurgeTarget:
    """One retention decision unit: a (bucket, scope, sub_path) group.

    Attributes:
        bucket: Storage bucket name
        scope: Logical partition, the network name (e.g. "eth-mainnet")
        sub_path: Prefix under the scope where the module cache lives
        retention_boundary: Creation time of the youngest live file for this
            target, taken from metadata. Listed objects created after it
            must not be deleted.
    """

    bucket: str
    scope: str
    sub_path: str
    retention_boundary: datetime

    @property
    def prefix(self) -> str:
        """Listing prefix. The trailing slash keeps sibling subfolders out."""
        return f"{self.scope}/{self.sub_path.strip('/')}/"

    def __str__(self) -> str:
        return f"{self.bucket} ({self.scope}) {self.sub_path}"


@dataclass(frozen=True, slots=True)
class ObjectRecord:
    """One object observed while listing a prefix."""

    key: str
    created_at: datetime
    size_bytes: int


@dataclass(frozen=True, slots=True)
class ObjectClassification:
    """Block range and kind decoded from an object key."""

    range_low: int
    range_high: int
    kind: ArtifactKind

    def __post_init__(self) -> None:
        if self.range_low > self.range_high:
            raise ValueError(f"range_low ({self.range_low}) cannot exceed range_high ({self.range_high})")


@dataclass(frozen=True, slots=True)
class DeleteJob:
    """A single deletion work item, owned by exactly one worker."""

    target: PurgeTarget
    key: str
    size_bytes: int = 0
