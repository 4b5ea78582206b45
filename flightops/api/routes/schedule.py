"""Schedule planner endpoints: one staged editing session per open planner."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, ValidationError

from flightops.api.deps import (
    get_current_org,
    get_feature_settings,
    get_flight_repo,
    get_session,
    get_session_registry,
    get_training_repo,
)
from flightops.contracts.common import IsoDate
from flightops.contracts.flight import Flight
from flightops.contracts.settings import FeatureSettings
from flightops.persistence.repositories.crew_repo import TrainingRecordRepository
from flightops.persistence.repositories.flight_repo import FlightRepository
from flightops.services.sessions import ScheduleSession, SessionRegistry

router = APIRouter(prefix="/schedule", tags=["schedule"])


class OpenSessionRequest(BaseModel):
    date: IsoDate


class FieldEdit(BaseModel):
    field: str
    value: Any = None


class ReturnRequest(BaseModel):
    turnaround_minutes: int | None = Field(default=None, ge=0, le=24 * 60)


class DateSwitch(BaseModel):
    date: IsoDate


def _flight_or_404(flight: Flight | None) -> dict:
    if flight is None:
        raise HTTPException(status_code=404, detail="Flight not found in working copy")
    return flight.to_firestore()


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422, detail=exc.errors(include_url=False, include_context=False)
    )


@router.post("/sessions", status_code=201)
async def open_session(
    body: OpenSessionRequest,
    org_id: str = Depends(get_current_org),
    registry: SessionRegistry = Depends(get_session_registry),
    flight_repo: FlightRepository = Depends(get_flight_repo),
    records_repo: TrainingRecordRepository = Depends(get_training_repo),
    settings: FeatureSettings = Depends(get_feature_settings),
) -> dict:
    session = registry.open(org_id, body.date, flight_repo, records_repo, settings)
    await session.refresh(flight_repo)
    return session.view().model_dump(mode="json")


@router.get("/sessions/{session_id}")
async def get_schedule(
    session: ScheduleSession = Depends(get_session),
    flight_repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    """Refresh from the baseline (no-op while dirty) and return the working copy."""
    await session.refresh(flight_repo)
    return session.view().model_dump(mode="json")


@router.put("/sessions/{session_id}/date")
async def switch_date(
    body: DateSwitch,
    session: ScheduleSession = Depends(get_session),
    flight_repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    if not session.switch_date(body.date):
        raise HTTPException(
            status_code=409, detail="Unsynced changes pending; discard or sync first"
        )
    await session.refresh(flight_repo)
    return session.view().model_dump(mode="json")


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(
    session_id: str,
    org_id: str = Depends(get_current_org),
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    if not registry.close(session_id, org_id):
        raise HTTPException(status_code=404, detail="Schedule session not found")


# ------------------------------------------------------------------
# Working-copy edits
# ------------------------------------------------------------------


@router.post("/sessions/{session_id}/flights", status_code=201)
async def add_flight(
    template: dict[str, Any],
    session: ScheduleSession = Depends(get_session),
) -> dict:
    try:
        flight = session.store.insert_new(**template)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return flight.to_firestore()


@router.post("/sessions/{session_id}/flights/{flight_id}/segment", status_code=201)
async def add_segment(
    flight_id: str,
    session: ScheduleSession = Depends(get_session),
) -> dict:
    return _flight_or_404(session.store.add_segment(flight_id))


@router.post("/sessions/{session_id}/flights/{flight_id}/return", status_code=201)
async def add_return(
    flight_id: str,
    body: ReturnRequest | None = None,
    session: ScheduleSession = Depends(get_session),
) -> dict:
    turnaround = session.settings.turnaround_minutes
    if body is not None and body.turnaround_minutes is not None:
        turnaround = body.turnaround_minutes
    return _flight_or_404(session.store.add_return(flight_id, turnaround))


@router.patch("/sessions/{session_id}/flights/{flight_id}")
async def edit_flight(
    flight_id: str,
    edit: FieldEdit,
    session: ScheduleSession = Depends(get_session),
) -> dict:
    try:
        flight = session.store.update_field(flight_id, edit.field, edit.value)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _flight_or_404(flight)


@router.delete("/sessions/{session_id}/flights/{flight_id}", status_code=204)
async def remove_flight(
    flight_id: str,
    session: ScheduleSession = Depends(get_session),
) -> None:
    # Unknown IDs are ignored: the row may already be gone
    session.store.remove(flight_id)


@router.post("/sessions/{session_id}/import", status_code=201)
async def import_flights(
    flights: list[Flight],
    session: ScheduleSession = Depends(get_session),
) -> list[dict]:
    return [f.to_firestore() for f in session.store.insert_imported(flights)]


@router.post("/sessions/{session_id}/clear")
async def clear_schedule(session: ScheduleSession = Depends(get_session)) -> dict:
    cleared = session.store.clear_all()
    return {"cleared": cleared, "pending_removals": session.store.pending_removals}


@router.post("/sessions/{session_id}/discard")
async def discard_changes(
    session: ScheduleSession = Depends(get_session),
    flight_repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    """Drop unsynced edits, then pick up the current baseline."""
    session.store.discard()
    await session.refresh(flight_repo)
    return session.view().model_dump(mode="json")


# ------------------------------------------------------------------
# Sync
# ------------------------------------------------------------------


@router.get("/sessions/{session_id}/plan")
async def preview_sync(session: ScheduleSession = Depends(get_session)) -> dict:
    """The write-set the next sync would commit, without committing it."""
    ops = session.synchronizer.plan(session.store)
    return ops.model_dump(mode="json", exclude={"create_keys"})


@router.post("/sessions/{session_id}/sync")
async def sync_schedule(session: ScheduleSession = Depends(get_session)) -> dict:
    result = await session.synchronizer.sync(session.store)
    if not result.success:
        status = 502 if result.error.code == "sync_failed" else 409
        raise HTTPException(status_code=status, detail=result.error.model_dump())
    return result.model_dump(mode="json")
