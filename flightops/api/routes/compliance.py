"""Crew compliance endpoints (advisory warnings, duty totals)."""

from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from flightops.api.deps import (
    get_current_org,
    get_feature_settings,
    get_flight_repo,
    get_session_registry,
    get_training_repo,
)
from flightops.contracts.common import IsoDate
from flightops.contracts.settings import FeatureSettings
from flightops.persistence.repositories.crew_repo import TrainingRecordRepository
from flightops.persistence.repositories.flight_repo import FlightRepository
from flightops.services.compliance import ComplianceValidator, summarize_duty
from flightops.services.sessions import SessionRegistry

router = APIRouter(prefix="/compliance", tags=["compliance"])


class PilotCheck(BaseModel):
    crew_code: str
    date: IsoDate
    duration: float = Field(default=0.0, ge=0)
    editing_flight_id: str | None = None
    session_id: str | None = Field(
        default=None, description="Check against this session's working copy"
    )


@router.post("/check")
async def check_pilot(
    body: PilotCheck,
    org_id: str = Depends(get_current_org),
    registry: SessionRegistry = Depends(get_session_registry),
    flight_repo: FlightRepository = Depends(get_flight_repo),
    records_repo: TrainingRecordRepository = Depends(get_training_repo),
    settings: FeatureSettings = Depends(get_feature_settings),
) -> dict:
    """Recompute every warning for a pilot assignment.

    ``stale`` is true when a newer check for the same session started
    before this one finished; its warnings must then be ignored.
    """
    if body.session_id is not None:
        session = registry.get(body.session_id, org_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Schedule session not found")
        validator = session.validator
        flights = session.store.flights
        if body.date != session.store.date:
            flights = flights + await flight_repo.list_for_date(org_id, body.date)
    else:
        async def fetch_records(crew_code: str):
            return await records_repo.list_for_crew(org_id, crew_code)

        validator = ComplianceValidator(fetch_records, settings)
        flights = await flight_repo.list_for_date(org_id, body.date)

    token = validator.latest_token + 1
    warnings = await validator.validate(
        body.crew_code, body.date, body.duration, flights, body.editing_flight_id
    )
    return {
        "token": token,
        "stale": warnings is None,
        "warnings": warnings or [],
    }


@router.get("/duty/{crew_code}")
async def duty_summary(
    crew_code: str,
    on: date = Query(..., description="Reference date"),
    org_id: str = Depends(get_current_org),
    flight_repo: FlightRepository = Depends(get_flight_repo),
) -> dict:
    """Daily, 7-day and month-to-date flight time for the crew strip."""
    start = min(on - timedelta(days=7), on.replace(day=1))
    flights = await flight_repo.list_between(org_id, start.isoformat(), on.isoformat())
    return summarize_duty(flights, crew_code, on).model_dump(mode="json")
