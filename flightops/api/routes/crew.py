"""Crew reference data for the planner's pilot pickers."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from flightops.api.deps import get_crew_repo, get_current_org
from flightops.persistence.repositories.crew_repo import CrewRepository

router = APIRouter(prefix="/crew", tags=["crew"])


@router.get("/pilots")
async def list_pilots(
    org_id: str = Depends(get_current_org),
    repo: CrewRepository = Depends(get_crew_repo),
) -> list[dict]:
    """Flight crew eligible for the PIC and SIC columns, sorted by code."""
    return [m.to_firestore() for m in await repo.list_pilots(org_id)]
