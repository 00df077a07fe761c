# src/modpurger/core/retention/safety.py
"""Consistency check between listed objects and metadata boundaries."""

from modpurger.contracts.errors import ConsistencyViolationError
from modpurger.contracts.models import ObjectRecord, PurgeTarget
from modpurger.core.datastore.keys import PARTIAL_MARKER, is_partial


class SafetyValidator:
    """Rejects any listed object newer than its target's retention boundary.

    The boundary is the youngest file the metadata store knows about. A
    listed object created after it means the metadata is stale or wrong,
    and deleting anything under that target could destroy live data.
    Partial (uncommitted) artifacts are exempt: writers create them before
    the metadata store learns about them.
    """

    def __init__(self, partial_marker: str = PARTIAL_MARKER) -> None:
        self._partial_marker = partial_marker

    def check(self, target: PurgeTarget, record: ObjectRecord) -> None:
        """Validate one listed object.

        Raises:
            ConsistencyViolationError: If record is newer than the boundary
                and not a partial artifact
        """
        if record.created_at > target.retention_boundary and not is_partial(record.key, self._partial_marker):
            raise ConsistencyViolationError(target, record.key, record.created_at)
