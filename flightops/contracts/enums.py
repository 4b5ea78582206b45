"""Enumerations shared across all flight-operations contracts."""

from enum import Enum


class FlightStatus(str, Enum):
    """Operational status of a scheduled flight."""
    SCHEDULED = "Scheduled"
    OUTBOUND = "Outbound"
    INBOUND = "Inbound"
    ON_GROUND = "On Ground"
    DELAYED = "Delayed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class AircraftStatus(str, Enum):
    ACTIVE = "Active"
    MAINTENANCE = "Maintenance"
    AOG = "AOG"


class CheckCategory(str, Enum):
    """Maintenance inspection tier, keyed to the 600-hour cycle."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class MaintenanceState(str, Enum):
    GOOD = "Good"
    WARNING = "Warning"
    CRITICAL = "Critical"


class TrainingType(str, Enum):
    MEDICAL = "Medical"
    LICENSE = "License"
    OPC = "OPC"
    LPC = "LPC"
    DANGEROUS_GOODS = "Dangerous Goods"
    CRM = "CRM"
    SEP = "SEP"


# Documents whose expiry grounds a pilot
SAFETY_CRITICAL_DOCUMENTS = frozenset({TrainingType.MEDICAL.value, TrainingType.LICENSE.value})
