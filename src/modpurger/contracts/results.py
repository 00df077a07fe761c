"""Counters and reports produced by a purge run."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock

from modpurger.contracts.models import PurgeTarget


class AtomicCounter:
    """Integer counter safe for increment from many worker threads."""

    __slots__ = ("_lock", "_value")

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = Lock()

    def add(self, amount: int = 1) -> int:
        """Add amount and return the new value."""
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        return self._value


class RunCounters:
    """Per-target or global counters for a purge run.

    Workers increment concurrently. Values are only meaningful once every
    worker for the target has drained.

    Attributes:
        considered: Objects listed under the target prefix
        filtered: Objects excluded (unclassifiable, outside window, wrong kind)
        deleted: Objects deleted, or already absent
        skipped: Objects whose deletion failed after the retry
        bytes_reclaimed: Sum of sizes of deleted objects
    """

    def __init__(self) -> None:
        self._considered = AtomicCounter()
        self._filtered = AtomicCounter()
        self._deleted = AtomicCounter()
        self._skipped = AtomicCounter()
        self._bytes_reclaimed = AtomicCounter()

    def record_considered(self, count: int = 1) -> None:
        self._considered.add(count)

    def record_filtered(self, count: int = 1) -> None:
        self._filtered.add(count)

    def record_deleted(self, size_bytes: int) -> int:
        """Record one deletion and return the running total of deletions."""
        self._bytes_reclaimed.add(size_bytes)
        return self._deleted.add()

    def record_skipped(self) -> None:
        self._skipped.add()

    @property
    def considered(self) -> int:
        return self._considered.value

    @property
    def filtered(self) -> int:
        return self._filtered.value

    @property
    def deleted(self) -> int:
        return self._deleted.value

    @property
    def skipped(self) -> int:
        return self._skipped.value

    @property
    def bytes_reclaimed(self) -> int:
        return self._bytes_reclaimed.value

    @property
    def processed(self) -> int:
        """Jobs that reached a terminal state (deleted or skipped)."""
        return self.deleted + self.skipped

    def merge(self, other: RunCounters) -> None:
        """Fold another (drained) counter set into this one."""
        self._considered.add(other.considered)
        self._filtered.add(other.filtered)
        self._deleted.add(other.deleted)
        self._skipped.add(other.skipped)
        self._bytes_reclaimed.add(other.bytes_reclaimed)

    def as_dict(self) -> dict[str, int]:
        return {
            "considered": self.considered,
            "filtered": self.filtered,
            "deleted": self.deleted,
            "skipped": self.skipped,
            "bytes_reclaimed": self.bytes_reclaimed,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"RunCounters({fields})"


@dataclass
class TargetReport:
    """Outcome of purging one target.

    Attributes:
        target: The target that was processed
        counters: Counters for this target only
        candidates: Number of objects accepted into the deletion set
        declined: True if the operator answered "no" at the confirmation gate
        dry_run: True if deletion was not executed
        sample_keys: First few candidate keys, for dry-run previews
        duration_seconds: Wall-clock time spent on the target
    """

    target: PurgeTarget
    counters: RunCounters
    candidates: int = 0
    declined: bool = False
    dry_run: bool = False
    sample_keys: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0


@dataclass
class PurgeSummary:
    """Aggregate outcome of a purge run across all targets."""

    reports: list[TargetReport] = field(default_factory=list)
    totals: RunCounters = field(default_factory=RunCounters)
    duration_seconds: float = 0.0

    @property
    def candidates(self) -> int:
        return sum(report.candidates for report in self.reports)

    def add(self, report: TargetReport) -> None:
        self.reports.append(report)
        self.totals.merge(report.counters)
