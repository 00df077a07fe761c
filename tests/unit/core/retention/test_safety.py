"""Tests for SafetyValidator."""

from datetime import timedelta

import pytest

from modpurger.contracts import ConsistencyViolationError, ObjectRecord, PurgeTarget
from modpurger.core.retention.safety import SafetyValidator
from tests.fixtures.times import BOUNDARY

TARGET = PurgeTarget(bucket="b", scope="eth-mainnet", sub_path="mod/states", retention_boundary=BOUNDARY)


def _record(key: str, delta: timedelta) -> ObjectRecord:
    return ObjectRecord(key=key, created_at=BOUNDARY + delta, size_bytes=10)


class TestSafetyValidator:
    def test_older_object_passes(self) -> None:
        SafetyValidator().check(TARGET, _record("eth-mainnet/mod/states/0000002000-0000001000.kv.zst", -timedelta(seconds=1)))

    def test_object_at_boundary_passes(self) -> None:
        SafetyValidator().check(TARGET, _record("eth-mainnet/mod/states/0000002000-0000001000.kv.zst", timedelta(0)))

    def test_newer_object_raises(self) -> None:
        key = "eth-mainnet/mod/states/0000002000-0000001000.kv.zst"

        with pytest.raises(ConsistencyViolationError) as exc_info:
            SafetyValidator().check(TARGET, _record(key, timedelta(seconds=1)))

        assert exc_info.value.key == key
        assert exc_info.value.target is TARGET
        assert "is newer than module" in str(exc_info.value)

    def test_newer_partial_object_is_exempt(self) -> None:
        SafetyValidator().check(TARGET, _record("eth-mainnet/mod/states/0000002000-0000001000.kv.partial.zst", timedelta(days=3)))

    def test_newer_unclassifiable_object_still_raises(self) -> None:
        with pytest.raises(ConsistencyViolationError):
            SafetyValidator().check(TARGET, _record("eth-mainnet/mod/states/README", timedelta(days=3)))

    def test_custom_partial_marker(self) -> None:
        validator = SafetyValidator(partial_marker=".inprogress")

        validator.check(TARGET, _record("eth-mainnet/mod/states/0000002000-0000001000.kv.inprogress.zst", timedelta(days=1)))
        with pytest.raises(ConsistencyViolationError):
            validator.check(TARGET, _record("eth-mainnet/mod/states/0000002000-0000001000.kv.partial.zst", timedelta(days=1)))
