"""Reconcile a staged schedule with the persisted baseline.

The working copy is turned into the minimal write-set for one atomic
commit:

1. every staged flight takes ``order`` = its position in the sequence;
2. provisional flights become **creates**, persisted ones **updates**
   (full field patch, ``order`` always included);
3. the store's removal set becomes **deletes**, verbatim.

A failed commit leaves the store untouched so the dispatcher can retry.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable

from flightops.contracts.flight import Flight, is_provisional
from flightops.contracts.result import ServiceResult
from flightops.contracts.schedule import FlightUpdate, SyncOperationSet, SyncSummary
from flightops.persistence.errors import ScheduleTooLargeError
from flightops.persistence.repositories.flight_repo import FlightRepository
from flightops.services.staging import ScheduleStagingStore

logger = logging.getLogger(__name__)


def diff_schedule(flights: Iterable[Flight], removed_ids: Iterable[str]) -> SyncOperationSet:
    """Pure diff of a working sequence against the baseline."""
    ops = SyncOperationSet(deletes=list(removed_ids))
    for position, flight in enumerate(flights):
        ordered = flight.model_copy(update={"order": position})
        if is_provisional(ordered.id):
            ops.create_keys.append(ordered.id)
            ops.creates.append(ordered.model_copy(update={"id": None}))
        else:
            patch = ordered.model_dump(mode="json", exclude={"id"})
            ops.updates.append(FlightUpdate(id=ordered.id, patch=patch))
    return ops


def _assign_ids(ops: SyncOperationSet, id_map: dict[str, str]) -> SyncOperationSet:
    """Give creates their reserved IDs and repoint parents at persisted IDs."""
    creates = []
    for key, flight in zip(ops.create_keys, ops.creates):
        update = {"id": id_map[key]}
        if flight.parent_id in id_map:
            update["parent_id"] = id_map[flight.parent_id]
        creates.append(flight.model_copy(update=update))

    updates = []
    for item in ops.updates:
        parent = item.patch.get("parent_id")
        if parent in id_map:
            item = FlightUpdate(id=item.id, patch={**item.patch, "parent_id": id_map[parent]})
        updates.append(item)

    return ops.model_copy(update={"creates": creates, "updates": updates})


def committed_rows(ops: SyncOperationSet) -> list[Flight]:
    """The rows an operation set leaves in the store, as written."""
    rows = list(ops.creates)
    rows.extend(Flight.model_validate({**item.patch, "id": item.id}) for item in ops.updates)
    return rows


class ScheduleSynchronizer:
    """Pushes one staging store to Firestore, one commit at a time."""

    def __init__(self, repo: FlightRepository, org_id: str):
        self._repo = repo
        self._org_id = org_id
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def plan(self, store: ScheduleStagingStore) -> SyncOperationSet:
        return diff_schedule(store.flights, store.pending_removals)

    async def sync(self, store: ScheduleStagingStore) -> ServiceResult[SyncSummary]:
        """Commit the store's working copy.

        Edits made while the commit is outstanding stay dirty and go out
        with the next sync.  A second sync while one is in flight is
        refused.
        """
        if self._in_flight:
            return ServiceResult.fail(
                "sync_in_progress", "A sync is already running for this schedule."
            )
        if not store.is_dirty:
            return ServiceResult.fail("nothing_to_sync", "All changes are already saved.")

        revision = store.revision
        ops = self.plan(store)
        id_map = {
            key: self._repo.new_document_id(self._org_id) for key in ops.create_keys
        }
        ops = _assign_ids(ops, id_map)

        self._in_flight = True
        start = time.perf_counter()
        try:
            await self._repo.commit_schedule_sync(
                self._org_id, ops.creates, ops.updates, ops.deletes
            )
        except ScheduleTooLargeError as exc:
            logger.warning("Schedule sync for %s refused: %s", store.date, exc)
            return ServiceResult.fail(
                "schedule_too_large",
                "Too many changes to save at once. Sync part of the day first.",
                write_count=exc.write_count,
                limit=exc.limit,
            )
        except Exception:
            logger.exception("Schedule sync for %s failed", store.date)
            return ServiceResult.fail(
                "sync_failed",
                "Failed to sync changes to the dashboard. Please try again.",
                retryable=True,
            )
        finally:
            self._in_flight = False

        clean = store.mark_synced(committed_rows(ops), ops.deletes, id_map, revision)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Synced %s: %d created, %d updated, %d deleted (%.0f ms)",
            store.date, len(ops.creates), len(ops.updates), len(ops.deletes), duration_ms,
        )
        summary = SyncSummary(
            created=len(ops.creates),
            updated=len(ops.updates),
            deleted=len(ops.deletes),
            id_map=id_map,
            clean=clean,
        )
        return ServiceResult.ok(summary, duration_ms=duration_ms)
