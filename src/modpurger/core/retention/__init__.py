# src/modpurger/core/retention/__init__.py
"""Retention management for module caches.

Provides CandidateResolver for finding stale modules in the metadata
store and PurgeManager for deleting their files from bucket storage
behind consistency checks and operator confirmation.
"""

from modpurger.core.retention.confirm import ConfirmationGate
from modpurger.core.retention.filters import BlockWindow, ObjectFilter
from modpurger.core.retention.purge import PurgeManager
from modpurger.core.retention.resolver import AgeCriteria, CandidateResolver, SubfolderCriteria
from modpurger.core.retention.safety import SafetyValidator

__all__ = [
    "AgeCriteria",
    "BlockWindow",
    "CandidateResolver",
    "ConfirmationGate",
    "ObjectFilter",
    "PurgeManager",
    "SafetyValidator",
    "SubfolderCriteria",
]
