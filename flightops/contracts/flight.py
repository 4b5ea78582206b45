"""Flight: one scheduled operation on a given day.

Stored at: ``/organizations/{org_id}/flights/{flight_id}``

Identity comes in two classes:

- **persisted**: the opaque Firestore document ID;
- **provisional**: generated locally for rows that were never synced,
  prefixed ``temp-`` (created in the planner) or ``imported-``
  (materialized from an external schedule import).
"""

import uuid
from typing import Self

from pydantic import Field, field_validator, model_validator

from flightops.contracts.common import FirestoreModel, IsoDate
from flightops.contracts.enums import FlightStatus

ROUTE_SEPARATOR = "-"
TEMP_PREFIX = "temp-"
IMPORTED_PREFIX = "imported-"
PROVISIONAL_PREFIXES = (TEMP_PREFIX, IMPORTED_PREFIX)


def provisional_id(prefix: str = TEMP_PREFIX) -> str:
    """Fresh locally-generated identity, e.g. ``temp-3f2a9c0d1b7e4a55``."""
    if prefix not in PROVISIONAL_PREFIXES:
        raise ValueError(f"Unknown provisional prefix: {prefix!r}")
    return f"{prefix}{uuid.uuid4().hex[:16]}"


def is_provisional(flight_id: str | None) -> bool:
    """True when the ID was never assigned by the store."""
    return flight_id is None or flight_id.startswith(PROVISIONAL_PREFIXES)


class Flight(FirestoreModel):
    """A scheduled flight as edited by the dispatcher.

    ``order`` is the visual position within the day; it is only
    authoritative once written by a schedule sync.  ``parent_id`` links
    a derived segment or return leg to the root flight of its chain.
    """

    id: str | None = None
    date: IsoDate
    flight_number: str = ""
    route: str = Field(default="", description="e.g. OGL-KAI")
    aircraft_registration: str = ""
    aircraft_type: str = ""
    etd: str = Field(default="", pattern=r"^(\d{1,2}:\d{2})?$", description="Local HH:MM")
    flight_time: float | None = Field(default=None, ge=0, description="Planned hours")
    commercial_time: str = Field(default="", description="Free-form H:MM")
    pic: str = ""
    sic: str = ""
    customer: str = ""
    customer_id: str = ""
    status: FlightStatus = FlightStatus.SCHEDULED
    notes: str = ""
    order: int | None = Field(default=None, ge=0)
    parent_id: str | None = None

    @field_validator("route", mode="before")
    @classmethod
    def normalize_route(cls, v: str | None) -> str:
        return (v or "").strip().upper()

    @field_validator("pic", "sic", mode="before")
    @classmethod
    def normalize_crew_code(cls, v: str | None) -> str:
        return (v or "").strip().upper()

    @model_validator(mode="after")
    def validate_route(self) -> Self:
        if ROUTE_SEPARATOR in self.route:
            tokens = self.route.split(ROUTE_SEPARATOR)
            if len(tokens) != 2 or not tokens[0]:
                raise ValueError(
                    f"route {self.route!r} must be ORIGIN-DESTINATION"
                )
        return self

    @property
    def is_provisional(self) -> bool:
        return is_provisional(self.id)
