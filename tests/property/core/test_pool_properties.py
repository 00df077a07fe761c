"""Property-based tests for DeletionPool accounting."""

import threading
from collections import Counter
from datetime import UTC, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from modpurger.contracts import DeleteJob, PurgeTarget
from modpurger.core.pooling import DeletionPool, PoolConfig
from tests.property.settings import SLOW_SETTINGS

TARGET = PurgeTarget("bucket", "eth-mainnet", "mod", datetime(2024, 1, 1, tzinfo=UTC))


@pytest.mark.slow
@given(
    n_jobs=st.integers(min_value=0, max_value=200),
    workers=st.integers(min_value=1, max_value=16),
    queue_size=st.integers(min_value=1, max_value=32),
    data=st.data(),
)
@SLOW_SETTINGS
def test_every_job_reaches_exactly_one_terminal_state(
    n_jobs: int, workers: int, queue_size: int, data: st.DataObject
) -> None:
    # Failures per job: 0 succeeds, 1 succeeds on retry, 2 is skipped
    failures = data.draw(st.lists(st.integers(min_value=0, max_value=2), min_size=n_jobs, max_size=n_jobs))
    jobs = [DeleteJob(target=TARGET, key=f"k{i}", size_bytes=i) for i in range(n_jobs)]
    remaining = {job.key: f for job, f in zip(jobs, failures, strict=True)}
    attempts: Counter[str] = Counter()
    lock = threading.Lock()

    def delete(job: DeleteJob, timeout: float) -> bool:
        with lock:
            attempts[job.key] += 1
            if remaining[job.key] > 0:
                remaining[job.key] -= 1
                raise ConnectionError("transient")
        return True

    pool = DeletionPool(PoolConfig(workers=workers, queue_size=queue_size), sleep=lambda _: None)
    counters = pool.purge(jobs, delete)

    assert counters.processed == n_jobs
    assert counters.skipped == failures.count(2)
    assert counters.deleted == n_jobs - failures.count(2)
    assert counters.bytes_reclaimed == sum(job.size_bytes for job, f in zip(jobs, failures, strict=True) if f < 2)
    assert all(attempts[job.key] == min(f + 1, 2) for job, f in zip(jobs, failures, strict=True))
