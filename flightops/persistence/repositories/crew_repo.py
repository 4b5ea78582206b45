"""Repositories for crew members and their training records."""

from __future__ import annotations

from flightops.contracts.crew import CrewMember, TrainingRecord
from flightops.persistence.repositories.base import BaseRepository


class CrewRepository(BaseRepository[CrewMember]):
    def __init__(self):
        super().__init__(CrewMember, "crew", key_field="code")

    async def list_pilots(self, org_id: str) -> list[CrewMember]:
        """Flight crew only, sorted by code (cabin crew excluded)."""
        members = await self.list_all(org_id)
        return sorted((m for m in members if m.is_pilot), key=lambda m: m.code)


class TrainingRecordRepository(BaseRepository[TrainingRecord]):
    def __init__(self):
        super().__init__(TrainingRecord, "training_records")

    async def list_for_crew(self, org_id: str, crew_code: str) -> list[TrainingRecord]:
        """All qualification records held by ``crew_code``."""
        return await self.list_where(org_id, "crew_code", crew_code.upper())
