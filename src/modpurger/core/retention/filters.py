# src/modpurger/core/retention/filters.py
"""Candidate filtering by artifact kind, block window and creation time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from modpurger.contracts.enums import ArtifactKind
from modpurger.contracts.errors import ClassificationError, ConfigurationError
from modpurger.contracts.models import ObjectClassification, ObjectRecord
from modpurger.core.datastore.keys import classify


@dataclass(frozen=True)
class BlockWindow:
    """Half-open block range [start, end). end=None leaves it open-ended."""

    start: int = 0
    end: int | None = None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ConfigurationError(f"start block must be >= 0, got {self.start}")
        if self.end is not None and self.end <= self.start:
            raise ConfigurationError(f"end block ({self.end}) must be greater than start block ({self.start})")

    def overlaps(self, classification: ObjectClassification) -> bool:
        """Whether the artifact's block range touches the window."""
        if self.end is not None and classification.range_low >= self.end:
            return False
        return classification.range_high > self.start


@dataclass(frozen=True)
class ObjectFilter:
    """Decides which listed objects enter a target's deletion set.

    Attributes:
        kinds: Artifact kinds to keep (None keeps every kind)
        window: Poisoned block window (None keeps every range)
        exclude_after: Objects created after this instant are left alone
    """

    kinds: frozenset[ArtifactKind] | None = None
    window: BlockWindow | None = None
    exclude_after: datetime | None = None

    def is_excluded_by_time(self, record: ObjectRecord) -> bool:
        return self.exclude_after is not None and record.created_at > self.exclude_after

    def accepts(self, record: ObjectRecord) -> bool:
        """Classify record and apply the kind and window filters.

        Unclassifiable keys are never accepted.
        """
        try:
            classification = classify(record.key)
        except ClassificationError:
            return False
        if self.kinds is not None and classification.kind not in self.kinds:
            return False
        return self.window is None or self.window.overlaps(classification)
