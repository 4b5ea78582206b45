"""Sync operation set: the argument of one atomic schedule commit.

Derived from the staging store at sync time, never persisted.
"""

from typing import Any

from pydantic import BaseModel, Field

from flightops.contracts.flight import Flight


class FlightUpdate(BaseModel):
    """Field patch for a persisted flight. Always carries ``order``."""

    id: str = Field(..., min_length=1)
    patch: dict[str, Any]


class SyncOperationSet(BaseModel):
    creates: list[Flight] = Field(default_factory=list)
    # Provisional IDs of ``creates``, same order; never sent to the store
    create_keys: list[str] = Field(default_factory=list)
    updates: list[FlightUpdate] = Field(default_factory=list)
    deletes: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    @property
    def write_count(self) -> int:
        return len(self.creates) + len(self.updates) + len(self.deletes)


class SyncSummary(BaseModel):
    """Outcome of a successful sync, returned to the UI."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    id_map: dict[str, str] = Field(
        default_factory=dict, description="Provisional ID -> persisted ID"
    )
    clean: bool = Field(
        default=True, description="False when edits landed while the commit was in flight"
    )


class ScheduleView(BaseModel):
    """Read projection of a staged schedule for the planner grid."""

    session_id: str
    date: str | None
    dirty: bool
    syncing: bool = False
    pending_removals: list[str] = Field(default_factory=list)
    flights: list[Flight] = Field(default_factory=list)
    groups: dict[str, list[Flight]] = Field(default_factory=dict)
    chains: dict[str, list[str]] = Field(
        default_factory=dict, description="Root flight ID -> IDs of its derived legs"
    )
