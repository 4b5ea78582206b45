"""Repository for scheduled flights, including the atomic schedule sync."""

from __future__ import annotations

import logging

from google.cloud.firestore import DELETE_FIELD

from flightops.contracts.flight import Flight
from flightops.contracts.schedule import FlightUpdate
from flightops.persistence.errors import ScheduleTooLargeError
from flightops.persistence.firestore_client import get_firestore_client
from flightops.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# Firestore rejects write batches above this size
MAX_BATCH_WRITES = 500


class FlightRepository(BaseRepository[Flight]):
    def __init__(self):
        super().__init__(Flight, "flights")

    async def list_for_date(self, org_id: str, date: str) -> list[Flight]:
        """Full replacement set of flights for one schedule day."""
        return await self.list_where(org_id, "date", date)

    async def list_between(
        self, org_id: str, start_date: str, end_date: str
    ) -> list[Flight]:
        """Flights from ``start_date`` to ``end_date`` inclusive (ISO dates sort lexically)."""
        query = (
            self._collection_ref(org_id)
            .where("date", ">=", start_date)
            .where("date", "<=", end_date)
        )
        return await self._collect(query)

    def new_document_id(self, org_id: str) -> str:
        """Reserve an auto-generated document ID (client-side, no round-trip)."""
        return self._collection_ref(org_id).document().id

    async def commit_schedule_sync(
        self,
        org_id: str,
        creates: list[Flight],
        updates: list[FlightUpdate],
        deletes: list[str],
    ) -> list[str]:
        """Apply creates, updates and deletes in one Firestore batch.

        Either every write lands or none does: readers never observe a
        day with a mix of old and new ``order`` values.  Creates carrying
        an ``id`` (reserved with ``new_document_id``) keep it.  Returns
        the document IDs of ``creates``, in order.
        """
        write_count = len(creates) + len(updates) + len(deletes)
        if write_count > MAX_BATCH_WRITES:
            raise ScheduleTooLargeError(write_count, MAX_BATCH_WRITES)

        db = get_firestore_client()
        batch = db.batch()
        col = self._collection_ref(org_id)

        created_ids: list[str] = []
        for flight in creates:
            data = flight.to_firestore()
            doc_id = data.pop("id", None)
            ref = col.document(doc_id) if doc_id else col.document()
            batch.set(ref, data)
            created_ids.append(ref.id)

        for update in updates:
            # Cleared fields are removed, matching the shape of created documents
            patch = {
                k: (DELETE_FIELD if v is None else v)
                for k, v in update.patch.items()
                if k != "id"
            }
            batch.update(col.document(update.id), patch)

        for doc_id in deletes:
            batch.delete(col.document(doc_id))

        await batch.commit()
        logger.info(
            "Committed schedule sync for %s: %d created, %d updated, %d deleted",
            org_id, len(creates), len(updates), len(deletes),
        )
        return created_ids
