"""Fleet maintenance views: next-check table and overview counters."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from flightops.api.deps import get_aircraft_repo, get_current_org, get_feature_settings
from flightops.contracts.settings import FeatureSettings
from flightops.persistence.repositories.aircraft_repo import AircraftRepository
from flightops.services.maintenance import (
    classify_check,
    component_status,
    fleet_maintenance_summary,
    overview_progress,
)

router = APIRouter(prefix="/fleet", tags=["fleet"])


@router.get("/checks")
async def list_checks(
    org_id: str = Depends(get_current_org),
    repo: AircraftRepository = Depends(get_aircraft_repo),
    settings: FeatureSettings = Depends(get_feature_settings),
) -> list[dict]:
    if not settings.enable_fleet_checks:
        raise HTTPException(status_code=403, detail="Fleet checks module is not enabled")
    fleet = sorted(await repo.list_all(org_id), key=lambda a: a.registration)
    return [classify_check(ac).model_dump(mode="json") for ac in fleet]


@router.get("/summary")
async def fleet_summary(
    org_id: str = Depends(get_current_org),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    fleet = sorted(await repo.list_all(org_id), key=lambda a: a.registration)
    return {
        "summary": fleet_maintenance_summary(fleet).model_dump(mode="json"),
        "aircraft": [
            {**ac.to_firestore(), "progress": overview_progress(ac)} for ac in fleet
        ],
    }


@router.get("/{registration}/component-status")
async def get_component_status(
    registration: str,
    interval: float = Query(..., gt=0, description="Task interval in flight hours"),
    last_performed: float = Query(..., ge=0, description="Airframe hours at last completion"),
    org_id: str = Depends(get_current_org),
    repo: AircraftRepository = Depends(get_aircraft_repo),
) -> dict:
    aircraft = await repo.get(org_id, registration)
    if aircraft is None:
        raise HTTPException(status_code=404, detail="Aircraft not found")
    status = component_status(aircraft.current_hours, interval, last_performed)
    return {"registration": aircraft.registration, **status.model_dump(mode="json")}
