"""Tests for the schedule staging store."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from flightops.contracts.flight import Flight
from flightops.services.staging import ScheduleStagingStore

DAY = "2024-01-01"


def _flight(fid: str, reg: str = "8R-GHS", order: int | None = None, **kw) -> Flight:
    return Flight(id=fid, date=kw.pop("date", DAY), aircraft_registration=reg, order=order, **kw)


@pytest.fixture
def baseline() -> list[Flight]:
    return [
        _flight("p3", order=2, flight_number="TGY103"),
        _flight("p1", order=0, flight_number="TGY101", route="OGL-KAI", etd="08:00", flight_time=1.0),
        _flight("nx", order=None, reg="8R-TWO"),
        _flight("p2", order=1, reg="8R-TWO"),
        _flight("other-day", order=0, date="2024-01-02"),
        _flight("ny", order=None),
    ]


@pytest.fixture
def store(baseline) -> ScheduleStagingStore:
    s = ScheduleStagingStore()
    assert s.load(baseline, DAY)
    return s


def _ids(store: ScheduleStagingStore) -> list[str]:
    return [f.id for f in store.flights]


class TestLoad:
    def test_filters_and_sorts(self, store):
        assert _ids(store) == ["p1", "p2", "p3", "nx", "ny"]
        assert store.date == DAY
        assert not store.is_dirty

    def test_load_while_dirty_is_noop(self, store, baseline):
        store.update_field("p1", "notes", "edited")
        before = store.flights
        assert store.load([], DAY) is False
        assert store.flights == before
        assert store.is_dirty

    def test_load_with_pending_removal_is_noop(self, store):
        store.remove("p2")
        assert store.load([], DAY) is False
        assert "p2" not in _ids(store)

    def test_discard_after_rejected_load_restores_baseline(self, store):
        original = store.flights
        store.update_field("p1", "notes", "edited")
        store.remove("p3")
        store.load([], DAY)
        store.discard()
        assert store.flights == original
        assert store.pending_removals == []
        assert not store.is_dirty

    def test_load_after_discard_takes_new_baseline(self, store):
        store.update_field("p1", "notes", "edited")
        store.discard()
        assert store.load([_flight("z", order=0)], DAY)
        assert _ids(store) == ["z"]

    def test_switching_date(self, store, baseline):
        assert store.load(baseline, "2024-01-02")
        assert _ids(store) == ["other-day"]


class TestInsert:
    def test_insert_new(self, store):
        flight = store.insert_new(
            aircraft_registration="8R-GHS", aircraft_type="C208B", flight_number="TGY"
        )
        assert flight.id.startswith("temp-")
        assert flight.date == DAY
        assert _ids(store)[-1] == flight.id
        assert store.is_dirty

    def test_insert_new_ignores_template_identity(self, store):
        flight = store.insert_new(id="p1", order=7)
        assert flight.id != "p1"
        assert flight.order is None

    def test_insert_new_invalid_template(self, store):
        with pytest.raises(ValidationError):
            store.insert_new(route="-KAI")
        assert not store.is_dirty

    def test_insert_derived_after_source(self, store):
        derived = Flight(id="temp-x", date=DAY)
        store.insert_derived("p2", derived)
        assert _ids(store) == ["p1", "p2", "temp-x", "p3", "nx", "ny"]

    def test_insert_derived_unknown_source_appends(self, store):
        store.insert_derived("gone", Flight(id="temp-x", date=DAY))
        assert _ids(store)[-1] == "temp-x"
        assert store.is_dirty

    def test_add_return(self, store):
        ret = store.add_return("p1", 30)
        assert _ids(store)[1] == ret.id
        assert ret.flight_number == "TGY102"
        assert ret.route == "KAI-OGL"
        assert ret.etd == "09:30"
        assert ret.parent_id == "p1"

    def test_add_segment(self, store):
        seg = store.add_segment("p1")
        assert _ids(store)[1] == seg.id
        assert seg.route == "KAI-"

    def test_add_segment_unknown_source(self, store):
        assert store.add_segment("gone") is None
        assert not store.is_dirty

    def test_insert_imported(self, store):
        added = store.insert_imported([Flight(id="x", date=DAY, order=4)])
        assert added[0].id.startswith("imported-")
        assert added[0].order is None
        assert _ids(store)[-1] == added[0].id
        assert store.is_dirty

    def test_insert_imported_nothing(self, store):
        assert store.insert_imported([]) == []
        assert not store.is_dirty


class TestUpdateAndRemove:
    def test_update_field(self, store):
        updated = store.update_field("p1", "route", "kai-ogl")
        assert updated.route == "KAI-OGL"
        assert store.get("p1").route == "KAI-OGL"
        assert store.is_dirty

    def test_update_coerces_values(self, store):
        assert store.update_field("p1", "flight_time", "1.5").flight_time == 1.5

    def test_update_unknown_id_is_noop(self, store):
        assert store.update_field("gone", "notes", "x") is None
        assert not store.is_dirty

    def test_update_unknown_field(self, store):
        with pytest.raises(ValueError):
            store.update_field("p1", "colour", "red")

    def test_update_id_forbidden(self, store):
        with pytest.raises(ValueError):
            store.update_field("p1", "id", "other")

    def test_update_invalid_value_keeps_row(self, store):
        with pytest.raises(ValidationError):
            store.update_field("p1", "etd", "soon")
        assert store.get("p1").etd == "08:00"

    def test_remove_persisted_queues_deletion(self, store):
        assert store.remove("p2")
        assert "p2" not in _ids(store)
        assert store.pending_removals == ["p2"]

    def test_remove_provisional_leaves_no_trace(self, store):
        flight = store.insert_new()
        store.remove(flight.id)
        assert flight.id not in _ids(store)
        assert store.pending_removals == []

    def test_remove_unknown_is_noop(self, store):
        assert store.remove("gone") is False
        assert not store.is_dirty

    def test_clear_all(self, store):
        temp = store.insert_new()
        assert store.clear_all() == 6
        assert store.flights == []
        assert sorted(store.pending_removals) == ["nx", "ny", "p1", "p2", "p3"]
        assert temp.id not in store.pending_removals

    def test_clear_all_empty(self):
        assert ScheduleStagingStore().clear_all() == 0


class TestGrouping:
    def test_first_seen_order(self, store):
        groups = store.grouped()
        assert list(groups) == ["8R-GHS", "8R-TWO"]
        assert [f.id for f in groups["8R-GHS"]] == ["p1", "p3", "ny"]
        assert [f.id for f in groups["8R-TWO"]] == ["p2", "nx"]

    def test_fleet_order_includes_idle_aircraft(self, store):
        groups = store.grouped(["8R-TWO", "8R-IDL", "8R-GHS"])
        assert list(groups) == ["8R-TWO", "8R-IDL", "8R-GHS"]
        assert groups["8R-IDL"] == []


def _committed(store: ScheduleStagingStore, id_map: dict[str, str]) -> list[Flight]:
    """Rows as a commit of the current working copy would write them."""
    rows = []
    for position, flight in enumerate(store.flights):
        update = {"order": position, "id": id_map.get(flight.id, flight.id)}
        if flight.parent_id in id_map:
            update["parent_id"] = id_map[flight.parent_id]
        rows.append(flight.model_copy(update=update))
    return rows


class TestMarkSynced:
    def test_clean_after_matching_revision(self, store):
        temp = store.insert_new()
        store.remove("p3")
        revision = store.revision
        id_map = {temp.id: "real-1"}
        clean = store.mark_synced(_committed(store, id_map), ["p3"], id_map, revision)
        assert clean
        assert not store.is_dirty
        assert store.get("real-1") is not None
        assert [f.order for f in store.flights] == list(range(len(store)))
        assert [f.id for f in store.baseline] == _ids(store)

    def test_stays_dirty_when_edited_during_commit(self, store):
        temp = store.insert_new()
        revision = store.revision
        id_map = {temp.id: "real-1"}
        committed = _committed(store, id_map)
        store.update_field("p1", "notes", "late edit")
        assert store.mark_synced(committed, [], id_map, revision) is False
        assert store.is_dirty
        assert store.get("real-1") is not None

    def test_discard_after_dirty_commit_returns_to_committed_rows(self, store):
        temp = store.insert_new(flight_number="TGY900")
        store.remove("p2")
        revision = store.revision
        id_map = {temp.id: "real-1"}
        committed = _committed(store, id_map)
        store.update_field("p1", "notes", "late edit")

        store.mark_synced(committed, ["p2"], id_map, revision)
        store.discard()

        assert "p2" not in _ids(store)
        assert "real-1" in _ids(store)
        assert store.get("p1").notes == ""
        assert not store.is_dirty

    def test_parent_ids_adopted(self, store):
        temp = store.insert_new()
        seg = store.add_segment(temp.id)
        id_map = {temp.id: "real-1", seg.id: "real-2"}
        store.mark_synced(_committed(store, id_map), [], id_map, store.revision)
        assert store.get("real-2").parent_id == "real-1"

    def test_created_row_removed_during_commit_is_queued(self, store):
        temp = store.insert_new()
        revision = store.revision
        id_map = {temp.id: "real-1"}
        committed = _committed(store, id_map)
        store.remove(temp.id)
        store.mark_synced(committed, [], id_map, revision)
        assert store.pending_removals == ["real-1"]

    def test_discard_during_commit(self, store):
        temp = store.insert_new()
        revision = store.revision
        id_map = {temp.id: "real-1"}
        committed = _committed(store, id_map)
        store.discard()
        store.mark_synced(committed, [], id_map, revision)
        assert not store.is_dirty
        assert store.pending_removals == []
        assert _ids(store) == [f.id for f in committed]
