"""Flight-operations data contracts: Pydantic v2 models.

Data authority
--------------

**Firestore** (source of truth, scoped per organization):
- ``Flight``: ``/organizations/{org_id}/flights/{id}``
- ``Aircraft``: ``/organizations/{org_id}/fleet/{registration}``
- ``CrewMember``: ``/organizations/{org_id}/crew/{code}``
- ``TrainingRecord``: ``/organizations/{org_id}/training_records/{id}``

**In-memory** (one editing session, never persisted directly):
- Staged schedule: working copy of one day's flights plus removal set

Calculated (never persisted)
----------------------------
- ``SyncOperationSet``: creates / updates / deletes for one atomic commit
- ``CheckStatus`` / ``ComponentStatus`` / ``FleetMaintenanceSummary``
- ``DutySummary``: crew flight-time totals
"""

from flightops.contracts.enums import (
    SAFETY_CRITICAL_DOCUMENTS,
    AircraftStatus,
    CheckCategory,
    FlightStatus,
    MaintenanceState,
    TrainingType,
)
from flightops.contracts.common import FirestoreModel
from flightops.contracts.result import ServiceError, ServiceResult
from flightops.contracts.flight import (
    IMPORTED_PREFIX,
    ROUTE_SEPARATOR,
    TEMP_PREFIX,
    Flight,
    is_provisional,
    provisional_id,
)
from flightops.contracts.aircraft import (
    Aircraft,
    CheckStatus,
    ComponentStatus,
    FleetMaintenanceSummary,
)
from flightops.contracts.crew import CrewMember, DutySummary, TrainingRecord
from flightops.contracts.schedule import (
    FlightUpdate,
    ScheduleView,
    SyncOperationSet,
    SyncSummary,
)
from flightops.contracts.settings import FeatureSettings

__all__ = [
    # Enums
    "AircraftStatus",
    "CheckCategory",
    "FlightStatus",
    "MaintenanceState",
    "TrainingType",
    "SAFETY_CRITICAL_DOCUMENTS",
    # Common
    "FirestoreModel",
    "FeatureSettings",
    # Result
    "ServiceError",
    "ServiceResult",
    # Domain models
    "Flight",
    "IMPORTED_PREFIX",
    "ROUTE_SEPARATOR",
    "TEMP_PREFIX",
    "is_provisional",
    "provisional_id",
    "Aircraft",
    "CheckStatus",
    "ComponentStatus",
    "FleetMaintenanceSummary",
    "CrewMember",
    "DutySummary",
    "TrainingRecord",
    "FlightUpdate",
    "ScheduleView",
    "SyncOperationSet",
    "SyncSummary",
]
