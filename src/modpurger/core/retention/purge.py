# src/modpurger/core/retention/purge.py
"""Purge manager for module caches in bucket storage.

Processes purge targets one at a time. For each target the full listing
is collected, filtered and safety-checked before a single delete is
issued, so the deletion set is one decision point per target even though
the deletions themselves run concurrently and in any order.
"""

from __future__ import annotations

from collections.abc import Iterable
from time import perf_counter

from modpurger.contracts.enums import Decision
from modpurger.contracts.models import DeleteJob, ObjectRecord, PurgeTarget
from modpurger.contracts.object_store import ObjectStore
from modpurger.contracts.results import PurgeSummary, RunCounters, TargetReport
from modpurger.core.logging import get_logger
from modpurger.core.pooling import DeletionPool, PoolConfig
from modpurger.core.retention.confirm import ConfirmationGate
from modpurger.core.retention.filters import ObjectFilter
from modpurger.core.retention.safety import SafetyValidator
from modpurger.core.storage.lister import ObjectLister

logger = get_logger(__name__)

# Number of candidate keys kept on a report for previews
SAMPLE_SIZE = 10


def format_size(size_bytes: int) -> str:
    """Human-readable binary size (e.g. "1.5 GiB")."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ("KiB", "MiB", "GiB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TiB"


class PurgeManager:
    """Runs the list → filter → validate → confirm → delete sequence.

    Every collaborator is injected so tests can drive the manager with an
    in-memory store, a fake clock and a scripted confirmation gate.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        lister: ObjectLister | None = None,
        pool: DeletionPool | None = None,
        validator: SafetyValidator | None = None,
        gate: ConfirmationGate | None = None,
        object_filter: ObjectFilter | None = None,
        list_limit: int | None = None,
    ) -> None:
        """Initialize PurgeManager.

        Args:
            store: Object storage backend (deletes go here)
            lister: Bounded lister (defaults to one over store)
            pool: Deletion pool (defaults to PoolConfig defaults)
            validator: Consistency check against retention boundaries
            gate: Confirmation gate (defaults to never prompting)
            object_filter: Kind, block window and time filters
            list_limit: Cap on objects listed per target (None is unbounded)
        """
        self._store = store
        self._lister = lister if lister is not None else ObjectLister(store)
        self._pool = pool if pool is not None else DeletionPool(PoolConfig())
        self._validator = validator if validator is not None else SafetyValidator()
        self._gate = gate if gate is not None else ConfirmationGate.always_yes()
        self._filter = object_filter if object_filter is not None else ObjectFilter()
        self._list_limit = list_limit

    def collect(self, target: PurgeTarget, counters: RunCounters) -> list[DeleteJob]:
        """List, filter and validate every object under target.

        Args:
            target: Target to enumerate
            counters: Receives considered/filtered counts

        Returns:
            Deletion set for the target

        Raises:
            ConsistencyViolationError: If any object is newer than the
                boundary. Nothing has been deleted at that point.
            ListingError: If listing fails or times out. Collected jobs
                are discarded.
        """
        jobs: list[DeleteJob] = []

        def on_each(record: ObjectRecord) -> None:
            counters.record_considered()
            if self._filter.is_excluded_by_time(record):
                counters.record_filtered()
                return
            self._validator.check(target, record)
            if not self._filter.accepts(record):
                counters.record_filtered()
                return
            jobs.append(DeleteJob(target=target, key=record.key, size_bytes=record.size_bytes))

        self._lister.list(target.bucket, target.prefix, on_each, limit=self._list_limit)
        return jobs

    def _delete(self, job: DeleteJob, timeout: float) -> bool:
        return self._store.delete(job.target.bucket, job.key, timeout=timeout)

    def purge_target(self, target: PurgeTarget, *, dry_run: bool = False) -> TargetReport:
        """Purge one target.

        Args:
            target: Target to purge
            dry_run: Collect and report without deleting or prompting

        Returns:
            TargetReport for the target
        """
        start_time = perf_counter()
        counters = RunCounters()
        log = logger.bind(bucket=target.bucket, network=target.scope, subfolder=target.sub_path)
        log.info("purge_target_started", retention_boundary=target.retention_boundary.isoformat())

        jobs = self.collect(target, counters)
        candidate_bytes = sum(job.size_bytes for job in jobs)
        report = TargetReport(
            target=target,
            counters=counters,
            candidates=len(jobs),
            dry_run=dry_run,
            sample_keys=[job.key for job in jobs[:SAMPLE_SIZE]],
        )
        log.info("candidates_collected", candidates=len(jobs), considered=counters.considered, bytes=candidate_bytes)

        if dry_run or not jobs:
            report.duration_seconds = perf_counter() - start_time
            return report

        decision = self._gate.confirm(
            f"Delete {len(jobs)} file(s) ({format_size(candidate_bytes)}) from gs://{target.bucket}/{target.prefix}?"
        )
        if decision is Decision.NO:
            log.info("purge_target_declined")
            report.declined = True
            report.duration_seconds = perf_counter() - start_time
            return report

        self._pool.purge(jobs, self._delete, counters)
        report.duration_seconds = perf_counter() - start_time
        log.info(
            "purge_target_completed",
            deleted=counters.deleted,
            skipped=counters.skipped,
            bytes_reclaimed=counters.bytes_reclaimed,
            elapsed_seconds=round(report.duration_seconds, 3),
        )
        return report

    def purge(self, targets: Iterable[PurgeTarget], *, dry_run: bool = False) -> PurgeSummary:
        """Purge targets sequentially, oldest first as given.

        A fatal error on any target (consistency violation, listing failure)
        propagates and stops the run. Targets already purged stay purged.

        Returns:
            PurgeSummary with per-target reports and global totals
        """
        start_time = perf_counter()
        summary = PurgeSummary()
        for target in targets:
            summary.add(self.purge_target(target, dry_run=dry_run))
        summary.duration_seconds = perf_counter() - start_time
        logger.info("purge_completed", targets=len(summary.reports), **summary.totals.as_dict())
        return summary
