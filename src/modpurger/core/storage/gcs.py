# src/modpurger/core/storage/gcs.py
"""Google Cloud Storage backend for the ObjectStore protocol."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC
from typing import TYPE_CHECKING

from google.api_core import exceptions as gax
from google.cloud import storage
from google.cloud.storage.retry import DEFAULT_RETRY

from modpurger.contracts.models import ObjectRecord

if TYPE_CHECKING:
    from google.api_core.retry import Retry

__all__ = ["GCSObjectStore"]


class GCSObjectStore:
    """ObjectStore over google-cloud-storage.

    Listing uses the library's default request retry. Deletes issue a
    single request by default; the deletion pool owns the retry policy.
    Pass delete_retry to layer request-level retries underneath.
    """

    def __init__(
        self,
        client: storage.Client | None = None,
        *,
        project: str | None = None,
        billing_project: str | None = None,
        request_timeout_seconds: float = 60.0,
        delete_retry: Retry | None = None,
    ) -> None:
        """Initialize GCS store.

        Args:
            client: Existing client (one is created from ADC when omitted)
            project: Project for the created client
            billing_project: Project billed for requester-pays buckets
            request_timeout_seconds: Timeout for each listing page request
            delete_retry: Request-level retry for deletes (None disables)
        """
        self._client = client if client is not None else storage.Client(project=project)
        self._billing_project = billing_project
        self._request_timeout_seconds = request_timeout_seconds
        self._delete_retry = delete_retry

    def _bucket(self, bucket: str) -> storage.Bucket:
        return self._client.bucket(bucket, user_project=self._billing_project)

    def iter_objects(self, bucket: str, prefix: str) -> Iterator[ObjectRecord]:
        blobs = self._client.list_blobs(
            self._bucket(bucket),
            prefix=prefix,
            timeout=self._request_timeout_seconds,
            retry=DEFAULT_RETRY,
        )
        for blob in blobs:
            created_at = blob.time_created
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=UTC)
            yield ObjectRecord(key=blob.name, created_at=created_at, size_bytes=blob.size or 0)

    def delete(self, bucket: str, key: str, *, timeout: float) -> bool:
        blob = self._bucket(bucket).blob(key)
        try:
            blob.delete(timeout=timeout, retry=self._delete_retry)
        except gax.NotFound:
            return False
        return True
