"""Aircraft in the scheduling view of the fleet.

Owned by fleet management; the scheduling core treats it as read-only
reference data used for per-aircraft grouping and maintenance margins.

Stored at: ``/organizations/{org_id}/fleet/{registration}``
"""

from pydantic import Field

from flightops.contracts.common import FirestoreModel
from flightops.contracts.enums import AircraftStatus, CheckCategory, MaintenanceState


class Aircraft(FirestoreModel):
    """Airframe with its hour counters."""

    registration: str = Field(..., min_length=1, description="e.g. 8R-GHS")
    aircraft_type: str = Field(default="", description="e.g. C208B, 1900D")
    status: AircraftStatus = AircraftStatus.ACTIVE
    current_hours: float = Field(default=0.0, ge=0)
    next_check_hours: float = Field(default=0.0, ge=0)


class CheckStatus(FirestoreModel):
    """Next scheduled check for one aircraft. Calculated, never stored."""

    registration: str
    category: CheckCategory
    remaining: float = Field(..., description="Hours until the check, negative if overdue")
    progress: float = Field(..., ge=0, le=100, description="Percent of the 100h window used")
    state: MaintenanceState


class ComponentStatus(FirestoreModel):
    """Interval-based status of a tracked component or recurring task."""

    next_due: float
    remaining: float
    percentage_used: float = Field(..., ge=0, le=100)
    state: MaintenanceState


class FleetMaintenanceSummary(FirestoreModel):
    """Counters shown on the fleet overview cards."""

    total: int = 0
    active: int = 0
    in_maintenance: int = 0
    aog: int = 0
    due_for_check: int = Field(default=0, description="Checks < 50 hrs")
