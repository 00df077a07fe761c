# src/modpurger/contracts/__init__.py
"""Shared contracts for modpurger.

Value types, enums, errors and protocols used across the codec, resolver,
storage and deletion layers. Nothing in here performs I/O.
"""

from modpurger.contracts.enums import ArtifactKind, Decision
from modpurger.contracts.errors import (
    ClassificationError,
    ConfigurationError,
    ConsistencyViolationError,
    ListingError,
    ListingTimeoutError,
    PurgeError,
    ResolutionError,
)
from modpurger.contracts.models import DeleteJob, ObjectClassification, ObjectRecord, PurgeTarget
from modpurger.contracts.object_store import ObjectStore
from modpurger.contracts.results import AtomicCounter, PurgeSummary, RunCounters, TargetReport

__all__ = [
    "ArtifactKind",
    "AtomicCounter",
    "ClassificationError",
    "ConfigurationError",
    "ConsistencyViolationError",
    "Decision",
    "DeleteJob",
    "ListingError",
    "ListingTimeoutError",
    "ObjectClassification",
    "ObjectRecord",
    "ObjectStore",
    "PurgeError",
    "PurgeSummary",
    "PurgeTarget",
    "ResolutionError",
    "RunCounters",
    "TargetReport",
]
