"""Editing sessions: one staging store per open planner.

Sessions are independent of each other and only meet through the
persisted baseline (last sync wins for the whole day).
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from flightops.contracts.schedule import ScheduleView
from flightops.contracts.settings import FeatureSettings
from flightops.persistence.repositories.crew_repo import TrainingRecordRepository
from flightops.persistence.repositories.flight_repo import FlightRepository
from flightops.services.compliance import ComplianceValidator
from flightops.services.derivation import children_index
from flightops.services.staging import ScheduleStagingStore
from flightops.services.sync import ScheduleSynchronizer

logger = logging.getLogger(__name__)

# Abandoned planner tabs are dropped after this long without a request
DEFAULT_IDLE_TIMEOUT = 2 * 60 * 60  # seconds


@dataclass
class ScheduleSession:
    session_id: str
    org_id: str
    date: str
    store: ScheduleStagingStore
    synchronizer: ScheduleSynchronizer
    validator: ComplianceValidator
    settings: FeatureSettings = field(default_factory=FeatureSettings)
    last_seen: float = 0.0

    async def refresh(self, flight_repo: FlightRepository) -> bool:
        """Pull the baseline for ``date``; ignored by the store while dirty."""
        baseline = await flight_repo.list_for_date(self.org_id, self.date)
        return self.store.load(baseline, self.date)

    def switch_date(self, date: str) -> bool:
        """Point the session at another day. Refused while edits are pending."""
        if self.store.is_dirty:
            return False
        self.date = date
        return True

    def view(self, registrations: list[str] | None = None) -> ScheduleView:
        flights = self.store.flights
        chains = {
            root: [f.id for f in derived]
            for root, derived in children_index(flights).items()
        }
        return ScheduleView(
            session_id=self.session_id,
            date=self.store.date or self.date,
            dirty=self.store.is_dirty,
            syncing=self.synchronizer.in_flight,
            pending_removals=self.store.pending_removals,
            flights=flights,
            groups=self.store.grouped(registrations),
            chains=chains,
        )


class SessionRegistry:
    """In-process registry of open sessions, keyed by session ID.

    Sessions untouched for ``idle_timeout`` seconds are evicted the next
    time the registry is used; a session with a sync in flight is kept.
    """

    def __init__(
        self,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sessions: dict[str, ScheduleSession] = {}
        self._idle_timeout = idle_timeout
        self._clock = clock

    def open(
        self,
        org_id: str,
        date: str,
        flight_repo: FlightRepository,
        records_repo: TrainingRecordRepository,
        settings: FeatureSettings,
    ) -> ScheduleSession:
        self.prune()

        async def fetch_records(crew_code: str):
            return await records_repo.list_for_crew(org_id, crew_code)

        session = ScheduleSession(
            session_id=uuid.uuid4().hex,
            org_id=org_id,
            date=date,
            store=ScheduleStagingStore(),
            synchronizer=ScheduleSynchronizer(flight_repo, org_id),
            validator=ComplianceValidator(fetch_records, settings),
            settings=settings,
            last_seen=self._clock(),
        )
        self._sessions[session.session_id] = session
        logger.info("Opened schedule session %s for %s on %s", session.session_id, org_id, date)
        return session

    def get(self, session_id: str, org_id: str) -> ScheduleSession | None:
        self.prune()
        session = self._sessions.get(session_id)
        if session is None or session.org_id != org_id:
            return None
        session.last_seen = self._clock()
        return session

    def close(self, session_id: str, org_id: str) -> bool:
        if self.get(session_id, org_id) is None:
            return False
        del self._sessions[session_id]
        return True

    def prune(self) -> int:
        """Evict idle sessions. Returns how many were dropped."""
        cutoff = self._clock() - self._idle_timeout
        idle = [
            s for s in self._sessions.values()
            if s.last_seen < cutoff and not s.synchronizer.in_flight
        ]
        for session in idle:
            del self._sessions[session.session_id]
            if session.store.is_dirty:
                logger.warning(
                    "Evicted idle schedule session %s for %s with unsynced edits",
                    session.session_id, session.org_id,
                )
            else:
                logger.info("Evicted idle schedule session %s", session.session_id)
        return len(idle)

    def __len__(self) -> int:
        return len(self._sessions)
