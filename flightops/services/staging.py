"""Schedule staging store: the dispatcher's working copy of one day.

All planner edits land here, never directly on the persisted baseline.
The store is either *clean* (mirrors the last loaded baseline) or
*dirty* (holds unsynced edits and/or pending removals).  While dirty,
baseline refreshes are ignored: the last successful ``load()`` wins
until ``discard()`` or a sync resets the cycle.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from flightops.contracts.flight import (
    IMPORTED_PREFIX,
    TEMP_PREFIX,
    Flight,
    is_provisional,
    provisional_id,
)
from flightops.services.derivation import (
    DEFAULT_TURNAROUND_MINUTES,
    derive_continuation_segment,
    derive_return_leg,
)

logger = logging.getLogger(__name__)

# Fields the planner may not rewrite through update_field
_PROTECTED_FIELDS = frozenset({"id"})


def _order_key(indexed: tuple[int, Flight]) -> tuple[bool, int, int]:
    position, flight = indexed
    return (flight.order is None, flight.order or 0, position)


class ScheduleStagingStore:
    """Working sequence + removal set + dirty flag for one date."""

    def __init__(self) -> None:
        self._date: str | None = None
        self._baseline: list[Flight] = []
        self._flights: list[Flight] = []
        self._removed: list[str] = []
        self._dirty = False
        self._revision = 0
        self._discarded_at = 0

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def date(self) -> str | None:
        return self._date

    @property
    def is_dirty(self) -> bool:
        return self._dirty or bool(self._removed)

    @property
    def revision(self) -> int:
        """Bumped by every mutation."""
        return self._revision

    @property
    def flights(self) -> list[Flight]:
        return list(self._flights)

    @property
    def pending_removals(self) -> list[str]:
        return list(self._removed)

    @property
    def baseline(self) -> list[Flight]:
        return list(self._baseline)

    def get(self, flight_id: str) -> Flight | None:
        index = self._index_of(flight_id)
        return self._flights[index] if index is not None else None

    def __len__(self) -> int:
        return len(self._flights)

    # ------------------------------------------------------------------
    # Baseline
    # ------------------------------------------------------------------

    def load(self, baseline: Iterable[Flight], date: str) -> bool:
        """Replace the working copy with ``baseline`` filtered to ``date``.

        Sorted by ``order``; flights without one go last, in feed order.
        Returns ``False`` (and changes nothing) while the store is dirty.
        """
        if self.is_dirty:
            logger.info(
                "Ignoring baseline refresh for %s: %d unsynced edit(s) pending",
                date, len(self._removed) + int(self._dirty),
            )
            return False

        day = [f for f in baseline if f.date == date]
        ordered = [f for _, f in sorted(enumerate(day), key=_order_key)]
        self._date = date
        self._baseline = [f.model_copy(deep=True) for f in ordered]
        self._flights = [f.model_copy(deep=True) for f in ordered]
        self._removed = []
        self._dirty = False
        logger.debug("Loaded %d flight(s) for %s", len(ordered), date)
        return True

    def discard(self) -> None:
        """Drop every unsynced edit and return to the last loaded baseline."""
        self._flights = [f.model_copy(deep=True) for f in self._baseline]
        self._removed = []
        self._dirty = False
        self._revision += 1
        self._discarded_at = self._revision

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert_new(self, **template: Any) -> Flight:
        """Append a fresh provisional row built from ``template`` defaults."""
        fields = {"date": self._date, **template}
        fields["id"] = provisional_id(TEMP_PREFIX)
        fields.pop("order", None)
        flight = Flight.model_validate(fields)
        self._flights.append(flight)
        self._touch()
        return flight

    def insert_derived(self, source_id: str, derived: Flight) -> Flight:
        """Insert ``derived`` right after ``source_id``, or append if it is gone."""
        index = self._index_of(source_id)
        if index is None:
            self._flights.append(derived)
        else:
            self._flights.insert(index + 1, derived)
        self._touch()
        return derived

    def insert_imported(self, flights: Iterable[Flight]) -> list[Flight]:
        """Append rows from an external import, each with a fresh ``imported-`` ID."""
        added = [
            f.model_copy(update={"id": provisional_id(IMPORTED_PREFIX), "order": None})
            for f in flights
        ]
        if added:
            self._flights.extend(added)
            self._touch()
        return added

    def add_segment(self, source_id: str) -> Flight | None:
        source = self.get(source_id)
        if source is None:
            return None
        return self.insert_derived(source_id, derive_continuation_segment(source))

    def add_return(
        self, source_id: str, turnaround_minutes: int = DEFAULT_TURNAROUND_MINUTES
    ) -> Flight | None:
        source = self.get(source_id)
        if source is None:
            return None
        return self.insert_derived(
            source_id, derive_return_leg(source, turnaround_minutes)
        )

    def update_field(self, flight_id: str, field: str, value: Any) -> Flight | None:
        """Replace one field; unknown IDs are a no-op returning ``None``.

        Raises ``ValueError`` for unknown or protected field names and
        ``pydantic.ValidationError`` when the new value is invalid.
        """
        if field not in Flight.model_fields or field in _PROTECTED_FIELDS:
            raise ValueError(f"Field {field!r} cannot be edited")
        index = self._index_of(flight_id)
        if index is None:
            logger.debug("update_field on unknown flight %s ignored", flight_id)
            return None
        data = self._flights[index].model_dump()
        data[field] = value
        updated = Flight.model_validate(data)
        self._flights[index] = updated
        self._touch()
        return updated

    def remove(self, flight_id: str) -> bool:
        """Drop a row; persisted IDs are queued for deletion on next sync."""
        index = self._index_of(flight_id)
        if index is None:
            logger.debug("remove on unknown flight %s ignored", flight_id)
            return False
        del self._flights[index]
        self._queue_removal(flight_id)
        self._touch()
        return True

    def clear_all(self) -> int:
        """Remove every row of the day. Returns how many rows were cleared."""
        count = len(self._flights)
        if count == 0:
            return 0
        for flight in self._flights:
            self._queue_removal(flight.id)
        self._flights = []
        self._touch()
        return count

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def grouped(self, registrations: Iterable[str] | None = None) -> dict[str, list[Flight]]:
        """Rows grouped by aircraft, working-sequence order kept inside each group.

        With ``registrations`` the groups follow that order and include
        aircraft without flights; otherwise groups appear in first-seen order.
        """
        groups: dict[str, list[Flight]] = {}
        if registrations is not None:
            for reg in registrations:
                groups.setdefault(reg, [])
        for flight in self._flights:
            groups.setdefault(flight.aircraft_registration, []).append(flight)
        return groups

    # ------------------------------------------------------------------
    # Sync bookkeeping
    # ------------------------------------------------------------------

    def mark_synced(
        self,
        committed: Iterable[Flight],
        submitted_deletes: Iterable[str],
        id_map: dict[str, str],
        revision: int,
    ) -> bool:
        """Record a successful commit taken at ``revision``.

        ``committed`` holds the rows exactly as written (persisted IDs,
        ``order`` set) and becomes the new baseline, so a later
        ``discard()`` returns to what the store now holds.  Submitted
        deletes leave the removal set, created rows adopt their persisted
        IDs, and the store turns clean unless it was edited while the
        commit was in flight.  Returns the resulting clean state.
        """
        self._baseline = [
            f.model_copy(deep=True)
            for _, f in sorted(enumerate(committed), key=_order_key)
        ]
        submitted = set(submitted_deletes)
        self._removed = [i for i in self._removed if i not in submitted]
        if id_map and self._discarded_at <= revision:
            staged = {f.id for f in self._flights}
            # Created rows deleted while the commit was in flight
            for key, real_id in id_map.items():
                if key not in staged:
                    self._queue_removal(real_id)
        if id_map:
            self._flights = [self._adopt(f, id_map) for f in self._flights]
        if self._discarded_at > revision and not self.is_dirty:
            # Discarded mid-commit: fall back to what was committed
            self._flights = [f.model_copy(deep=True) for f in self._baseline]
        elif self._revision == revision:
            self._flights = [
                f.model_copy(update={"order": i}) for i, f in enumerate(self._flights)
            ]
            self._dirty = False
        return not self.is_dirty

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _index_of(self, flight_id: str | None) -> int | None:
        for i, flight in enumerate(self._flights):
            if flight.id == flight_id:
                return i
        return None

    def _queue_removal(self, flight_id: str | None) -> None:
        if not is_provisional(flight_id) and flight_id not in self._removed:
            self._removed.append(flight_id)

    def _touch(self) -> None:
        self._dirty = True
        self._revision += 1

    @staticmethod
    def _adopt(flight: Flight, id_map: dict[str, str]) -> Flight:
        update: dict[str, Any] = {}
        if flight.id in id_map:
            update["id"] = id_map[flight.id]
        if flight.parent_id in id_map:
            update["parent_id"] = id_map[flight.parent_id]
        return flight.model_copy(update=update) if update else flight

