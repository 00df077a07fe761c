"""Tests for CandidateResolver staleness queries."""

from __future__ import annotations

from datetime import UTC, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from modpurger.contracts import ConfigurationError, PurgeTarget, ResolutionError
from modpurger.core.datastore.database import MetadataDB
from modpurger.core.datastore.schema import MARKER_FILETYPE
from modpurger.core.retention.resolver import AgeCriteria, CandidateResolver, SubfolderCriteria
from tests.fixtures.metadata import insert_file
from tests.fixtures.times import NOW, days_ago

MONTH = timedelta(days=30)


@pytest.fixture
def resolver(metadata_db: MetadataDB) -> CandidateResolver:
    return CandidateResolver(metadata_db)


class TestAgeCriteria:
    def test_returns_module_whose_youngest_file_is_stale(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(40))

        targets = resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW)

        assert targets == [
            PurgeTarget(
                bucket="substreams-cache",
                scope="eth-mainnet",
                sub_path="mod/a",
                retention_boundary=days_ago(40),
            )
        ]

    def test_recent_file_keeps_module_alive(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(2))

        assert resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW) == []

    def test_deleted_and_marker_files_do_not_count(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(60))
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(1), deleted_at=days_ago(1))
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(1), filetype=MARKER_FILETYPE)

        targets = resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW)

        assert [t.retention_boundary for t in targets] == [days_ago(60)]

    def test_other_networks_excluded(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, network="sol-mainnet", subfolder="mod/a", created_at=days_ago(90))

        assert resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW) == []

    def test_ordered_oldest_boundary_first(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/young", created_at=days_ago(35))
        insert_file(metadata_db, subfolder="mod/old", created_at=days_ago(300))
        insert_file(metadata_db, bucket="other-bucket", subfolder="mod/mid", created_at=days_ago(100))

        targets = resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW)

        assert [t.sub_path for t in targets] == ["mod/old", "mod/mid", "mod/young"]
        assert targets[1].bucket == "other-bucket"

    def test_boundaries_are_timezone_aware(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))

        (target,) = resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW)

        assert target.retention_boundary.tzinfo is not None
        assert target.retention_boundary.utcoffset() == UTC.utcoffset(None)

    @pytest.mark.parametrize(
        ("scope", "max_age"),
        [("", MONTH), ("eth-mainnet", timedelta(0)), ("eth-mainnet", -MONTH)],
    )
    def test_invalid_criteria_rejected(self, scope: str, max_age: timedelta) -> None:
        with pytest.raises(ConfigurationError):
            AgeCriteria(scope=scope, max_age=max_age)


class TestSubfolderCriteria:
    def test_matches_literal_subfolder_only(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))
        insert_file(metadata_db, subfolder="mod/ab", created_at=days_ago(90))
        insert_file(metadata_db, network="sol-mainnet", subfolder="mod/a", created_at=days_ago(80))

        targets = resolver.resolve(SubfolderCriteria(sub_path="mod/a", max_age=MONTH), as_of=NOW)

        assert [(t.scope, t.sub_path) for t in targets] == [("eth-mainnet", "mod/a"), ("sol-mainnet", "mod/a")]

    def test_single_caps_to_oldest(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, network="sol-mainnet", subfolder="mod/a", created_at=days_ago(80))
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))

        targets = resolver.resolve(SubfolderCriteria(sub_path="mod/a", max_age=MONTH, single=True), as_of=NOW)

        assert [t.scope for t in targets] == ["eth-mainnet"]

    def test_scope_restricts_network(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))
        insert_file(metadata_db, network="sol-mainnet", subfolder="mod/a", created_at=days_ago(80))

        targets = resolver.resolve(SubfolderCriteria(sub_path="mod/a", max_age=MONTH, scope="sol-mainnet"), as_of=NOW)

        assert [t.scope for t in targets] == ["sol-mainnet"]

    def test_injection_attempt_is_a_plain_value(self, metadata_db: MetadataDB, resolver: CandidateResolver) -> None:
        insert_file(metadata_db, subfolder="mod/a", created_at=days_ago(90))

        targets = resolver.resolve(SubfolderCriteria(sub_path="x' or '1'='1", max_age=MONTH), as_of=NOW)

        assert targets == []

    def test_query_uses_bound_parameters(self, resolver: CandidateResolver) -> None:
        query = resolver.build_query(SubfolderCriteria(sub_path="mod/a", max_age=MONTH, single=True), as_of=NOW)
        compiled = query.compile()

        assert "mod/a" not in str(compiled)
        assert "mod/a" in compiled.params.values()

    def test_empty_subfolder_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            SubfolderCriteria(sub_path="", max_age=MONTH)


class TestResolutionFailure:
    def test_query_failure_raises_resolution_error(self) -> None:
        db = MagicMock(spec=MetadataDB)
        db.connection.return_value.__enter__.return_value.execute.side_effect = OperationalError("select", {}, Exception("boom"))
        resolver = CandidateResolver(db)

        with pytest.raises(ResolutionError, match="querying module cache"):
            resolver.resolve(AgeCriteria(scope="eth-mainnet", max_age=MONTH), as_of=NOW)
