# src/modpurger/core/pooling/executor.py
"""Bounded worker pool for bulk object deletion.

A fixed set of worker threads drains a bounded job queue:
- At most `workers` deletions are in flight at once
- Every job is dequeued by exactly one worker
- A failed delete is retried exactly once after a capped backoff
- A job that fails twice is counted as skipped; siblings are unaffected

The pool knows nothing about storage. It calls a delete function with the
job and the per-object timeout, so it can be driven by a fake in tests.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from queue import Queue
from threading import Thread
from typing import Final

from tenacity import RetryCallState, Retrying, stop_after_attempt, wait_exponential

from modpurger.contracts.models import DeleteJob
from modpurger.contracts.results import AtomicCounter, RunCounters
from modpurger.core.logging import get_logger
from modpurger.core.pooling.config import PoolConfig

logger = get_logger(__name__)

# One attempt plus one retry
DELETE_ATTEMPTS: Final = 2

# Returns True when the object was removed, False when it was already absent.
DeleteFn = Callable[[DeleteJob, float], bool]

_STOP: Final = object()


class DeletionPool:
    """Fixed-size pool of delete workers sharing one bounded queue.

    Usage:
        pool = DeletionPool(PoolConfig(workers=250))
        counters = pool.purge(
            jobs,
            delete_fn=lambda job, timeout: store.delete(job.target.bucket, job.key, timeout=timeout),
        )
    """

    def __init__(self, config: PoolConfig, *, sleep: Callable[[float], None] = time.sleep) -> None:
        """Initialize pool with configuration.

        Args:
            config: Worker count, queue capacity, timeouts and backoff
            sleep: Sleep function used between attempts (injectable for tests)
        """
        self._config = config
        self._sleep = sleep

    @property
    def workers(self) -> int:
        """Maximum concurrent deletions."""
        return self._config.workers

    def purge(
        self,
        jobs: Iterable[DeleteJob],
        delete_fn: DeleteFn,
        counters: RunCounters | None = None,
    ) -> RunCounters:
        """Delete every job, blocking until the queue is drained.

        Args:
            jobs: Jobs to enqueue. Consumed lazily; the queue bound applies
                backpressure to the producer.
            delete_fn: Deletes one object within the given timeout
            counters: Counters to accumulate into (a fresh set if omitted)

        Returns:
            Counters with deleted/skipped/bytes_reclaimed updated
        """
        if counters is None:
            counters = RunCounters()
        queue: Queue[object] = Queue(maxsize=self._config.queue_size)
        processed = AtomicCounter()

        threads = [
            Thread(
                target=self._worker,
                args=(queue, delete_fn, counters, processed),
                name=f"purge-worker-{i}",
                daemon=True,
            )
            for i in range(self._config.workers)
        ]
        for thread in threads:
            thread.start()

        enqueued = 0
        try:
            for job in jobs:
                queue.put(job)
                enqueued += 1
        finally:
            # Workers exit on the sentinel once the real jobs ahead of it are done
            for _ in threads:
                queue.put(_STOP)
            for thread in threads:
                thread.join()

        logger.info(
            "deletion_drained",
            enqueued=enqueued,
            deleted=counters.deleted,
            skipped=counters.skipped,
            bytes_reclaimed=counters.bytes_reclaimed,
        )
        return counters

    def _worker(
        self,
        queue: Queue[object],
        delete_fn: DeleteFn,
        counters: RunCounters,
        processed: AtomicCounter,
    ) -> None:
        while True:
            item = queue.get()
            try:
                if item is _STOP:
                    return
                assert isinstance(item, DeleteJob)
                self._process(item, delete_fn, counters)
                done = processed.add()
                if done % self._config.progress_interval == 0:
                    logger.info("deletion_progress", processed=done)
            finally:
                queue.task_done()

    def _process(self, job: DeleteJob, delete_fn: DeleteFn, counters: RunCounters) -> None:
        try:
            removed = self._delete_with_retry(job, delete_fn)
        except Exception as e:
            # Persistent failure: the object stays, the pool carries on
            counters.record_skipped()
            logger.debug("delete_skipped", key=job.key, error=str(e), error_type=type(e).__name__)
            return
        # An already-absent object counts as deleted but reclaims nothing
        counters.record_deleted(job.size_bytes if removed else 0)

    def _delete_with_retry(self, job: DeleteJob, delete_fn: DeleteFn) -> bool:
        def _log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.debug("delete_retry", key=job.key, attempt=retry_state.attempt_number, error=str(error))

        retrying = Retrying(
            stop=stop_after_attempt(DELETE_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self._config.retry_initial_delay_seconds,
                max=self._config.retry_max_delay_seconds,
            ),
            sleep=self._sleep,
            before_sleep=_log_retry,
            reraise=True,
        )
        result: bool = retrying(delete_fn, job, self._config.delete_timeout_seconds)
        return result
