"""FastAPI dependency injection wiring."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from flightops.api.auth import UserClaims, verify_firebase_token
from flightops.contracts.settings import FeatureSettings
from flightops.persistence.repositories.aircraft_repo import AircraftRepository
from flightops.persistence.repositories.crew_repo import (
    CrewRepository,
    TrainingRecordRepository,
)
from flightops.persistence.repositories.flight_repo import FlightRepository
from flightops.services.sessions import ScheduleSession, SessionRegistry


# ------------------------------------------------------------------
# Current organization
# ------------------------------------------------------------------


def get_current_org(
    claims: UserClaims = Depends(verify_firebase_token),
) -> str:
    """Return the organization the authenticated user works for."""
    return claims.org_id


# ------------------------------------------------------------------
# Repositories (stateless, one instance per request)
# ------------------------------------------------------------------


def get_flight_repo() -> FlightRepository:
    return FlightRepository()


def get_aircraft_repo() -> AircraftRepository:
    return AircraftRepository()


def get_crew_repo() -> CrewRepository:
    return CrewRepository()


def get_training_repo() -> TrainingRecordRepository:
    return TrainingRecordRepository()


# ------------------------------------------------------------------
# Application state (singletons from app.state)
# ------------------------------------------------------------------


def get_feature_settings(request: Request) -> FeatureSettings:
    return request.app.state.feature_settings


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_session(
    session_id: str,
    org_id: str = Depends(get_current_org),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ScheduleSession:
    session = registry.get(session_id, org_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Schedule session not found")
    return session
