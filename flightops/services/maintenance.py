"""Maintenance-cycle calculations for the fleet views.

Checks follow a repeating 600-hour pattern keyed on the hour at which
the next check is due:

    remainder   0 -> D
    remainder 200 -> B
    remainder 400 -> C
    otherwise     -> A   (expected: 100, 300, 500)

Two progress figures exist and are deliberately kept apart: the checks
table uses a fixed 100-hour window, the overview cards use the ratio of
current hours to the next check hour.
"""

from __future__ import annotations

from typing import Iterable

from flightops.contracts.aircraft import (
    Aircraft,
    CheckStatus,
    ComponentStatus,
    FleetMaintenanceSummary,
)
from flightops.contracts.enums import AircraftStatus, CheckCategory, MaintenanceState

CHECK_CYCLE_HOURS = 600
CHECK_WINDOW_HOURS = 100

_WARNING_MARGIN = 50  # hours
_CRITICAL_MARGIN = 25  # hours

_CYCLE_CATEGORIES: dict[float, CheckCategory] = {
    0: CheckCategory.D,
    200: CheckCategory.B,
    400: CheckCategory.C,
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def check_category(next_check_hours: float) -> CheckCategory:
    return _CYCLE_CATEGORIES.get(next_check_hours % CHECK_CYCLE_HOURS, CheckCategory.A)


def check_state(remaining: float) -> MaintenanceState:
    if remaining < _CRITICAL_MARGIN:
        return MaintenanceState.CRITICAL
    if remaining < _WARNING_MARGIN:
        return MaintenanceState.WARNING
    return MaintenanceState.GOOD


def classify_check(aircraft: Aircraft) -> CheckStatus:
    """Category, margin and 100h-window progress of the next check."""
    remaining = aircraft.next_check_hours - aircraft.current_hours
    progress = _clamp((1 - remaining / CHECK_WINDOW_HOURS) * 100)
    return CheckStatus(
        registration=aircraft.registration,
        category=check_category(aircraft.next_check_hours),
        remaining=remaining,
        progress=progress,
        state=check_state(remaining),
    )


def overview_progress(aircraft: Aircraft) -> float:
    """Coarse bar for the fleet overview cards."""
    return _clamp(aircraft.current_hours / max(aircraft.next_check_hours, 1) * 100)


def fleet_maintenance_summary(fleet: Iterable[Aircraft]) -> FleetMaintenanceSummary:
    summary = FleetMaintenanceSummary()
    for aircraft in fleet:
        summary.total += 1
        if aircraft.status == AircraftStatus.ACTIVE:
            summary.active += 1
        elif aircraft.status == AircraftStatus.MAINTENANCE:
            summary.in_maintenance += 1
        elif aircraft.status == AircraftStatus.AOG:
            summary.aog += 1
        remaining = aircraft.next_check_hours - aircraft.current_hours
        # Overdue airframes are counted by the checks table, not here
        if 0 < remaining < _WARNING_MARGIN:
            summary.due_for_check += 1
    return summary


def component_status(
    current_hours: float, interval: float, last_performed: float
) -> ComponentStatus:
    """Status of an interval-based task last performed at ``last_performed`` hours."""
    if interval <= 0:
        raise ValueError("interval must be positive")
    next_due = last_performed + interval
    remaining = next_due - current_hours
    if remaining <= 0:
        state = MaintenanceState.CRITICAL
    elif remaining < _WARNING_MARGIN:
        state = MaintenanceState.WARNING
    else:
        state = MaintenanceState.GOOD
    return ComponentStatus(
        next_due=next_due,
        remaining=remaining,
        percentage_used=_clamp((current_hours - last_performed) / interval * 100),
        state=state,
    )
