"""Service record store for querying maintenance history.

Provides read-only access to the historical service records that the
prediction pipeline joins onto caller-supplied devices.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from medtech_api.errors import StoreUnavailable
from medtech_api.schemas import ServiceRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Read-only access to the full set of service records."""

    async def fetch_all_service_records(self) -> list[ServiceRecord]: ...


def _to_records(documents: Iterable[Mapping[str, Any]]) -> list[ServiceRecord]:
    try:
        return [ServiceRecord.model_validate(dict(doc)) for doc in documents]
    except (TypeError, ValueError, ValidationError) as e:
        raise StoreUnavailable(f"Service record could not be read: {e}") from e


class FirestoreRecordStore:
    """Service records backed by a Firestore collection.

    The whole collection is loaded on every call. Filtering is not pushed
    down to Firestore so that matching stays in the normalizer.
    """

    def __init__(self, client: Any, collection: str = "serviceRecords") -> None:
        """Initialize store.

        Args:
            client: ``google.cloud.firestore.Client`` (e.g. from ``firebase_admin.firestore.client()``)
            collection: Name of the service record collection
        """
        self._client = client
        self._collection = collection

    def _read_documents(self) -> list[dict[str, Any]]:
        snapshot = self._client.collection(self._collection).get()
        return [doc.to_dict() or {} for doc in snapshot]

    async def fetch_all_service_records(self) -> list[ServiceRecord]:
        """Load every document in the collection.

        Returns:
            All service records, in store order

        Raises:
            StoreUnavailable: If Firestore cannot be reached or a document is unreadable
        """
        try:
            documents = await run_in_threadpool(self._read_documents)
        except Exception as e:
            raise StoreUnavailable(
                f"Could not read collection '{self._collection}': {e}"
            ) from e

        records = _to_records(documents)
        logger.debug(f"Loaded {len(records)} service records from '{self._collection}'")
        return records


class InMemoryRecordStore:
    """Fixed set of service records held in memory."""

    def __init__(self, records: Iterable[ServiceRecord | Mapping[str, Any]] = ()) -> None:
        self._records = [
            r if isinstance(r, ServiceRecord) else ServiceRecord.model_validate(dict(r))
            for r in records
        ]

    async def fetch_all_service_records(self) -> list[ServiceRecord]:
        return list(self._records)


class UnavailableRecordStore:
    """Stand-in used when no backing store is configured; every read fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    async def fetch_all_service_records(self) -> list[ServiceRecord]:
        raise StoreUnavailable(self.reason)
