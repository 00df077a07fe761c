# src/modpurger/core/retention/resolver.py
"""Candidate resolution from the file metadata store.

A module cache is a (bucket, network, subfolder) group of files. Its
retention boundary is the creation time of its youngest live file, as
recorded by the cost estimator. A module is stale when that boundary is
older than the retention cutoff.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import Select, and_, func, select
from sqlalchemy.exc import SQLAlchemyError

from modpurger.contracts.errors import ConfigurationError, ResolutionError
from modpurger.contracts.models import PurgeTarget
from modpurger.core.datastore.schema import MARKER_FILETYPE, files_table
from modpurger.core.logging import get_logger

if TYPE_CHECKING:
    from modpurger.core.datastore.database import MetadataDB

logger = get_logger(__name__)


@dataclass(frozen=True)
class AgeCriteria:
    """Every module of a network whose youngest file is older than max_age."""

    scope: str
    max_age: timedelta

    def __post_init__(self) -> None:
        if not self.scope:
            raise ConfigurationError("age-based purge requires a network")
        if self.max_age <= timedelta(0):
            raise ConfigurationError(f"max_age must be positive, got {self.max_age}")


@dataclass(frozen=True)
class SubfolderCriteria:
    """A literal subfolder, under the same staleness predicate.

    Attributes:
        sub_path: Exact subfolder value as recorded in the metadata store
        max_age: Retention period
        scope: Optional network restriction
        single: Cap the result to the single oldest module
    """

    sub_path: str
    max_age: timedelta
    scope: str | None = None
    single: bool = False

    def __post_init__(self) -> None:
        if not self.sub_path:
            raise ConfigurationError("subfolder purge requires a subfolder")
        if self.max_age <= timedelta(0):
            raise ConfigurationError(f"max_age must be positive, got {self.max_age}")


Criteria = AgeCriteria | SubfolderCriteria


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; the store records UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class CandidateResolver:
    """Resolves purge targets from the file metadata store.

    Every predicate value is passed as a bound parameter.
    """

    def __init__(self, db: MetadataDB, *, marker_filetype: int = MARKER_FILETYPE) -> None:
        """Initialize CandidateResolver.

        Args:
            db: Metadata store connection
            marker_filetype: filetype value of marker/manifest records
        """
        self._db = db
        self._marker_filetype = marker_filetype

    def build_query(self, criteria: Criteria, as_of: datetime | None = None) -> Select[tuple[str, str, str, datetime]]:
        """Build the staleness query for criteria.

        Args:
            criteria: Age-based or subfolder criteria
            as_of: Reference datetime for the cutoff (defaults to now)

        Returns:
            SELECT yielding (bucket, network, subfolder, youngest) rows,
            oldest module first
        """
        if as_of is None:
            as_of = datetime.now(UTC)
        cutoff = as_of - criteria.max_age

        youngest = func.max(files_table.c.created_at)
        conditions = [
            files_table.c.deleted_at.is_(None),
            files_table.c.filetype != self._marker_filetype,
        ]
        if isinstance(criteria, AgeCriteria):
            conditions.append(files_table.c.network == criteria.scope)
        else:
            conditions.append(files_table.c.subfolder == criteria.sub_path)
            if criteria.scope:
                conditions.append(files_table.c.network == criteria.scope)

        query = (
            select(
                files_table.c.bucket,
                files_table.c.network,
                files_table.c.subfolder,
                youngest.label("youngest_file_creation_date"),
            )
            .where(and_(*conditions))
            .group_by(files_table.c.bucket, files_table.c.network, files_table.c.subfolder)
            .having(youngest < cutoff)
            .order_by(youngest.asc(), files_table.c.bucket, files_table.c.network, files_table.c.subfolder)
        )
        if isinstance(criteria, SubfolderCriteria) and criteria.single:
            query = query.limit(1)
        return query

    def resolve(self, criteria: Criteria, as_of: datetime | None = None) -> list[PurgeTarget]:
        """Resolve purge targets, oldest retention boundary first.

        Args:
            criteria: Age-based or subfolder criteria
            as_of: Reference datetime for the cutoff (defaults to now)

        Returns:
            List of PurgeTarget, possibly empty

        Raises:
            ResolutionError: If the query fails. Nothing is returned in that
                case: every later safety check relies on these boundaries.
        """
        query = self.build_query(criteria, as_of)
        try:
            with self._db.connection() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as e:
            raise ResolutionError(f"querying module cache: {e}") from e

        targets = [
            PurgeTarget(
                bucket=bucket,
                scope=network,
                sub_path=subfolder,
                retention_boundary=_as_utc(youngest),
            )
            for bucket, network, subfolder, youngest in rows
        ]
        logger.info("modules_resolved", count=len(targets), criteria=type(criteria).__name__)
        return targets
