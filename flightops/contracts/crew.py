"""Crew reference data and the training records used for compliance.

Stored at:
- ``/organizations/{org_id}/crew/{code}``
- ``/organizations/{org_id}/training_records/{record_id}``
"""

from datetime import date

from pydantic import Field, field_validator

from flightops.contracts.common import FirestoreModel
from flightops.contracts.enums import TrainingType


class CrewMember(FirestoreModel):
    code: str = Field(..., min_length=1, description="Short crew code, e.g. ADF")
    name: str = ""
    role: str = Field(default="", description="e.g. C208 Captain, Cabin Crew")

    @field_validator("code", mode="before")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def is_pilot(self) -> bool:
        return "cabin crew" not in self.role.lower()


class TrainingRecord(FirestoreModel):
    """A qualification document held by a crew member."""

    id: str | None = None
    crew_code: str = Field(..., min_length=1)
    type: TrainingType
    issue_date: date | None = None
    expiry_date: date

    @field_validator("issue_date", "expiry_date", mode="before")
    @classmethod
    def date_only(cls, v):
        # Records written by the dashboard may carry a time component
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v


class DutySummary(FirestoreModel):
    """Cumulative flight time of one crew member. Calculated, never stored."""

    crew_code: str
    daily: float = 0.0
    weekly: float = 0.0
    monthly: float = 0.0
