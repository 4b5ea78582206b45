"""Tests for the schedule diff and the atomic Firestore sync."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from flightops.contracts.flight import Flight, is_provisional, provisional_id
from flightops.persistence.repositories.flight_repo import FlightRepository
from flightops.services.staging import ScheduleStagingStore
from flightops.services.sync import ScheduleSynchronizer, diff_schedule
from tests.persistence.fake_firestore import FakeFirestoreClient

ORG = "org-test"
DAY = "2024-01-01"
PREFIX = f"organizations/{ORG}/flights/"


@pytest.fixture
def fake_client():
    return FakeFirestoreClient()


@pytest.fixture(autouse=True)
def patch_firestore(fake_client):
    with patch(
        "flightops.persistence.repositories.base.get_firestore_client",
        return_value=fake_client,
    ):
        with patch(
            "flightops.persistence.repositories.flight_repo.get_firestore_client",
            return_value=fake_client,
        ):
            yield


def _seed(client: FakeFirestoreClient, *flights: Flight) -> None:
    for flight in flights:
        data = flight.to_firestore()
        doc_id = data.pop("id")
        client.store[PREFIX + doc_id] = data


def _persisted(client: FakeFirestoreClient) -> dict[str, dict]:
    return {
        path[len(PREFIX):]: data
        for path, data in client.store.items()
        if path.startswith(PREFIX)
    }


@pytest.fixture
def repo() -> FlightRepository:
    return FlightRepository()


@pytest.fixture
async def store(fake_client, repo) -> ScheduleStagingStore:
    _seed(
        fake_client,
        Flight(id="p1", date=DAY, flight_number="TGY100", route="KAI-OGL",
               aircraft_registration="8R-GHS", etd="08:00", flight_time=1.0, order=0),
        Flight(id="p2", date=DAY, flight_number="TGY200", aircraft_registration="8R-GHS", order=1),
        Flight(id="p3", date=DAY, flight_number="TGY300", aircraft_registration="8R-TWO", order=2),
    )
    s = ScheduleStagingStore()
    s.load(await repo.list_for_date(ORG, DAY), DAY)
    return s


class TestDiffSchedule:
    def test_create_update_delete(self):
        a = Flight(id=provisional_id(), date=DAY, flight_number="TGY1")
        b = Flight(id="b", date=DAY, flight_number="TGY2", order=1)
        ops = diff_schedule([b, a], ["c"])

        assert len(ops.creates) == 1
        assert ops.creates[0].id is None
        assert ops.creates[0].order == 1
        assert ops.create_keys == [a.id]

        assert len(ops.updates) == 1
        assert ops.updates[0].id == "b"
        assert ops.updates[0].patch["order"] == 0
        assert "id" not in ops.updates[0].patch

        assert ops.deletes == ["c"]
        assert ops.write_count == 3

    def test_imported_rows_are_creates(self):
        flight = Flight(id=provisional_id("imported-"), date=DAY)
        ops = diff_schedule([flight], [])
        assert len(ops.creates) == 1
        assert ops.updates == []

    def test_empty(self):
        assert diff_schedule([], []).is_empty


class TestSynchronizer:
    async def test_commit_applies_every_change(self, fake_client, repo, store):
        store.remove("p3")
        new = store.insert_new(flight_number="TGY900", aircraft_registration="8R-GHS")
        store.update_field("p2", "pic", "abc")

        result = await ScheduleSynchronizer(repo, ORG).sync(store)

        assert result.success
        assert result.data.created == 1
        assert result.data.updated == 2
        assert result.data.deleted == 1
        assert result.data.clean

        real_id = result.data.id_map[new.id]
        docs = _persisted(fake_client)
        assert set(docs) == {"p1", "p2", real_id}
        assert docs["p2"]["pic"] == "ABC"
        assert docs[real_id]["order"] == 2
        assert len(fake_client.commits) == 1

        assert not store.is_dirty
        assert [f.id for f in store.flights] == ["p1", "p2", real_id]
        assert [f.order for f in store.flights] == [0, 1, 2]

    async def test_updated_documents_carry_no_nulls(self, fake_client, repo, store):
        store.update_field("p1", "flight_time", None)
        store.remove("p3")

        result = await ScheduleSynchronizer(repo, ORG).sync(store)

        assert result.success
        docs = _persisted(fake_client)
        assert "flight_time" not in docs["p1"]
        assert docs["p1"]["etd"] == "08:00"
        for data in docs.values():
            assert None not in data.values()
        assert store.get("p1").flight_time is None

    async def test_provisional_parent_rewritten(self, fake_client, repo, store):
        root = store.insert_new(flight_number="TGY500", route="KAI-OGL")
        segment = store.add_segment(root.id)
        assert segment.parent_id == root.id

        result = await ScheduleSynchronizer(repo, ORG).sync(store)

        root_real = result.data.id_map[root.id]
        seg_real = result.data.id_map[segment.id]
        docs = _persisted(fake_client)
        assert docs[seg_real]["parent_id"] == root_real
        assert store.get(seg_real).parent_id == root_real
        assert not any(is_provisional(d.get("parent_id")) for d in docs.values() if d.get("parent_id"))

    async def test_return_leg_points_at_persisted_root(self, fake_client, repo, store):
        leg = store.add_return("p1")
        result = await ScheduleSynchronizer(repo, ORG).sync(store)

        doc = _persisted(fake_client)[result.data.id_map[leg.id]]
        assert doc["parent_id"] == "p1"
        assert doc["route"] == "OGL-KAI"
        assert doc["etd"] == "09:30"
        assert doc["order"] == 1

    async def test_nothing_to_sync(self, fake_client, repo, store):
        result = await ScheduleSynchronizer(repo, ORG).sync(store)
        assert not result.success
        assert result.error.code == "nothing_to_sync"
        assert fake_client.commits == []

    async def test_failure_keeps_working_copy(self, fake_client, repo, store):
        store.remove("p3")
        new = store.insert_new(flight_number="TGY900")
        fake_client.fail_commits = True

        result = await ScheduleSynchronizer(repo, ORG).sync(store)

        assert not result.success
        assert result.error.code == "sync_failed"
        assert result.error.retryable
        assert store.is_dirty
        assert store.pending_removals == ["p3"]
        assert store.get(new.id) is not None
        assert set(_persisted(fake_client)) == {"p1", "p2", "p3"}

    async def test_retry_after_failure(self, fake_client, repo, store):
        store.remove("p3")
        sync = ScheduleSynchronizer(repo, ORG)
        fake_client.fail_commits = True
        assert not (await sync.sync(store)).success

        fake_client.fail_commits = False
        result = await sync.sync(store)
        assert result.success
        assert "p3" not in _persisted(fake_client)
        assert not store.is_dirty

    async def test_too_large(self, fake_client, repo, store):
        for _ in range(500):
            store.insert_new(flight_number="TGY1")

        result = await ScheduleSynchronizer(repo, ORG).sync(store)

        assert not result.success
        assert result.error.code == "schedule_too_large"
        assert result.error.details["write_count"] == 503
        assert fake_client.commits == []
        assert store.is_dirty


class _BlockingRepo:
    """Repository stand-in whose commit waits until released."""

    def __init__(self):
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.calls = 0
        self._next = 0

    def new_document_id(self, org_id: str) -> str:
        self._next += 1
        return f"real-{self._next}"

    async def commit_schedule_sync(self, org_id, creates, updates, deletes):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return [f.id for f in creates]


class TestSingleFlight:
    async def test_second_sync_refused(self):
        repo = _BlockingRepo()
        store = ScheduleStagingStore()
        store.load([], DAY)
        store.insert_new(flight_number="TGY1")
        sync = ScheduleSynchronizer(repo, ORG)

        first = asyncio.create_task(sync.sync(store))
        await repo.started.wait()
        assert sync.in_flight

        second = await sync.sync(store)
        assert not second.success
        assert second.error.code == "sync_in_progress"

        repo.release.set()
        assert (await first).success
        assert not sync.in_flight
        assert repo.calls == 1

    async def test_edit_during_commit_stays_dirty(self):
        repo = _BlockingRepo()
        store = ScheduleStagingStore()
        store.load([], DAY)
        created = store.insert_new(flight_number="TGY1")
        sync = ScheduleSynchronizer(repo, ORG)

        task = asyncio.create_task(sync.sync(store))
        await repo.started.wait()
        later = store.insert_new(flight_number="TGY2")
        repo.release.set()
        result = await task

        assert result.success
        assert not result.data.clean
        assert store.is_dirty
        assert store.get("real-1") is not None
        assert store.get(created.id) is None
        assert store.get(later.id) is not None

    async def test_delete_during_commit_queues_removal(self):
        repo = _BlockingRepo()
        store = ScheduleStagingStore()
        store.load([], DAY)
        created = store.insert_new(flight_number="TGY1")
        sync = ScheduleSynchronizer(repo, ORG)

        task = asyncio.create_task(sync.sync(store))
        await repo.started.wait()
        store.remove(created.id)
        repo.release.set()
        await task

        assert store.pending_removals == ["real-1"]
        assert store.is_dirty

    async def test_discard_after_dirty_commit_keeps_committed_state(self):
        repo = _BlockingRepo()
        store = ScheduleStagingStore()
        store.load(
            [
                Flight(id="p1", date=DAY, flight_number="TGY100", order=0),
                Flight(id="p2", date=DAY, flight_number="TGY200", order=1),
            ],
            DAY,
        )
        store.remove("p2")
        sync = ScheduleSynchronizer(repo, ORG)

        task = asyncio.create_task(sync.sync(store))
        await repo.started.wait()
        store.update_field("p1", "notes", "edited mid-commit")
        repo.release.set()
        assert (await task).success

        store.discard()

        assert [f.id for f in store.flights] == ["p1"]
        assert not store.is_dirty
        assert (await sync.sync(store)).error.code == "nothing_to_sync"
