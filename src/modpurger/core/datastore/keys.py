# src/modpurger/core/datastore/keys.py
"""Filename codec for module cache objects.

Module cache keys end in a filename of the form::

    <start>-<end>.<tag>[.zst]

where <tag> is one of "output", "kv" or "index". The two numbers are block
heights. Decoding is a pure function of the key; anything that does not
match the encoding raises ClassificationError and callers exclude the
object rather than failing the run.
"""

import posixpath
import re

from modpurger.contracts.enums import ArtifactKind
from modpurger.contracts.errors import ClassificationError
from modpurger.contracts.models import ObjectClassification

COMPRESSION_SUFFIX = ".zst"
PARTIAL_MARKER = ".partial"

_UINT64_MAX = 2**64 - 1
_DECIMAL_PATTERN = re.compile(r"^[0-9]+$")

_TAG_KINDS: dict[str, ArtifactKind] = {
    "output": ArtifactKind.OUTPUT,
    "kv": ArtifactKind.STATE,
    "index": ArtifactKind.INDEX,
}


def _strip_compression(name: str) -> str:
    if name.endswith(COMPRESSION_SUFFIX):
        return name[: -len(COMPRESSION_SUFFIX)]
    return name


def _parse_block(key: str, raw: str) -> int:
    # ASCII digits only: int() would accept "+1", " 1" and "1_000"
    if not _DECIMAL_PATTERN.match(raw):
        raise ClassificationError(key, f"block number {raw!r} is not an unsigned decimal")
    value = int(raw)
    if value > _UINT64_MAX:
        raise ClassificationError(key, f"block number {raw!r} overflows uint64")
    return value


def classify(key: str) -> ObjectClassification:
    """Decode block range and artifact kind from an object key.

    Args:
        key: Full object key or bare filename

    Returns:
        ObjectClassification with range_low <= range_high

    Raises:
        ClassificationError: If the filename does not follow the encoding
    """
    base = _strip_compression(posixpath.basename(key))
    parts = base.split(".")
    if len(parts) < 2:
        raise ClassificationError(key, "expected <start>-<end>.<tag>")

    numbers = parts[0].split("-")
    if len(numbers) != 2:
        raise ClassificationError(key, f"expected two '-'-separated block numbers, got {parts[0]!r}")

    first = _parse_block(key, numbers[0])
    second = _parse_block(key, numbers[1])

    tag = parts[1]
    if tag not in _TAG_KINDS:
        raise ClassificationError(key, f"invalid file type {tag!r}")
    kind = _TAG_KINDS[tag]

    # State (kv) files have always been named <end>-<start>, the reverse of
    # output and index files. Existing buckets depend on it.
    if kind is ArtifactKind.STATE:
        low, high = second, first
    else:
        low, high = first, second

    if low > high:
        raise ClassificationError(key, f"block range {low}-{high} is inverted")
    return ObjectClassification(range_low=low, range_high=high, kind=kind)


def is_partial(key: str, marker: str = PARTIAL_MARKER) -> bool:
    """Whether key marks an uncommitted (still being written) artifact."""
    return _strip_compression(key).endswith(marker)
