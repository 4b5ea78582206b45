"""Generic async Firestore repository for organization-scoped collections."""

from __future__ import annotations

import logging
from typing import Any, Generic, Type, TypeVar

from pydantic import ValidationError

from flightops.contracts.common import FirestoreModel
from flightops.persistence.firestore_client import get_firestore_client

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FirestoreModel)


class BaseRepository(Generic[T]):
    """CRUD for a Firestore subcollection under ``/organizations/{org_id}/``.

    Serialization relies entirely on the contract's ``to_firestore()``
    and ``from_firestore()`` methods, with no extra mapping layer.

    ``key_field`` names the model field used as document ID.  With the
    default ``"id"`` the field is stripped from the stored document and
    restored from the document ID on read; any other key field (e.g. an
    aircraft registration) is stored as-is.
    """

    def __init__(
        self, model_class: Type[T], collection_name: str, key_field: str = "id"
    ):
        self._model_class = model_class
        self._collection_name = collection_name
        self._key_field = key_field

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collection_ref(self, org_id: str):
        db = get_firestore_client()
        return (
            db.collection("organizations")
            .document(org_id)
            .collection(self._collection_name)
        )

    def _hydrate(self, doc: Any) -> T:
        data = doc.to_dict()
        if self._key_field == "id":
            data["id"] = doc.id
        return self._model_class.from_firestore(data)

    async def _collect(self, query: Any) -> list[T]:
        """Hydrate every streamed document, skipping ones that fail validation."""
        results: list[T] = []
        async for doc in query.stream():
            try:
                results.append(self._hydrate(doc))
            except ValidationError:
                logger.warning(
                    "Skipping malformed %s document %s", self._collection_name, doc.id,
                    exc_info=True,
                )
        return results

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, org_id: str, doc_id: str) -> T | None:
        """Fetch a single document by ID. Returns *None* if missing."""
        doc = await self._collection_ref(org_id).document(doc_id).get()
        if not doc.exists:
            return None
        return self._hydrate(doc)

    async def list_all(self, org_id: str) -> list[T]:
        """Stream every document in the collection."""
        return await self._collect(self._collection_ref(org_id))

    async def list_where(self, org_id: str, field: str, value: Any) -> list[T]:
        """Stream the documents whose ``field`` equals ``value``."""
        query = self._collection_ref(org_id).where(field, "==", value)
        return await self._collect(query)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, org_id: str, entity: T) -> str:
        """Create a document and return its ID.

        A key present on the entity is used as the document ID (so
        re-creating the same aircraft overwrites it); otherwise Firestore
        auto-generates one.
        """
        data = entity.to_firestore()
        if self._key_field == "id":
            doc_id = data.pop("id", None)
        else:
            doc_id = data.get(self._key_field)
        if doc_id:
            await self._collection_ref(org_id).document(doc_id).set(data)
            return doc_id
        ref = await self._collection_ref(org_id).add(data)
        return ref[1].id  # (write_result, doc_ref) tuple

    async def update(self, org_id: str, doc_id: str, entity: T) -> None:
        """Partial update (merge) of an existing document."""
        data = entity.to_firestore()
        data.pop("id", None)
        await (
            self._collection_ref(org_id)
            .document(doc_id)
            .set(data, merge=True)
        )

    async def delete(self, org_id: str, doc_id: str) -> None:
        """Delete a document."""
        await self._collection_ref(org_id).document(doc_id).delete()
