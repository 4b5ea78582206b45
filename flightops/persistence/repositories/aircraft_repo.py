"""Repository for the fleet (keyed by registration)."""

from __future__ import annotations

from flightops.contracts.aircraft import Aircraft
from flightops.persistence.repositories.base import BaseRepository


class AircraftRepository(BaseRepository[Aircraft]):
    def __init__(self):
        super().__init__(Aircraft, "fleet", key_field="registration")
