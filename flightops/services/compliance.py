"""Advisory crew checks run while a flight is being edited.

Two independent checks feed one warning list:

- **Duty period**: same-day cumulative flight time must not exceed 8.0h.
- **Document currency**: medical certificate and licence must not be
  expired on the flight date.

Nothing here blocks a submission.  A failed records lookup degrades to
"no document warnings" and is only logged.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Awaitable, Callable, Iterable

from flightops.contracts.crew import DutySummary, TrainingRecord
from flightops.contracts.enums import SAFETY_CRITICAL_DOCUMENTS
from flightops.contracts.flight import Flight
from flightops.contracts.settings import FeatureSettings

logger = logging.getLogger(__name__)

DUTY_LIMIT_HOURS = 8.0

RecordsFetcher = Callable[[str], Awaitable[list[TrainingRecord]]]


def _flies(flight: Flight, crew_code: str) -> bool:
    return crew_code in (flight.pic, flight.sic)


def check_duty_period(
    crew_code: str,
    flight_date: str,
    candidate_duration: float,
    flights: Iterable[Flight],
    excluding_flight_id: str | None = None,
) -> list[str]:
    """Warn when the crew member's day would exceed ``DUTY_LIMIT_HOURS``.

    The flight being edited is excluded by ID so an update is not
    counted twice.
    """
    if not crew_code or not flight_date:
        return []
    crew_code = crew_code.upper()
    previous = sum(
        f.flight_time or 0.0
        for f in flights
        if f.date == flight_date
        and _flies(f, crew_code)
        and (excluding_flight_id is None or f.id != excluding_flight_id)
    )
    candidate = candidate_duration or 0.0
    total = previous + candidate
    if total <= DUTY_LIMIT_HOURS:
        return []
    return [
        f"FDP Alert: {crew_code} has flown {previous:.1f}h on {flight_date}. "
        f"Adding this flight ({candidate:.1f}h) brings the total to {total:.1f}h, "
        f"exceeding the {DUTY_LIMIT_HOURS:.1f}h limit."
    ]


def expired_document_warnings(
    records: Iterable[TrainingRecord], as_of: date
) -> list[str]:
    """Safety-critical documents whose expiry date is strictly before ``as_of``."""
    warnings: list[str] = []
    for record in records:
        if record.type not in SAFETY_CRITICAL_DOCUMENTS:
            continue
        if record.expiry_date < as_of:
            warnings.append(
                f"EXPIRED: {record.type} ({record.expiry_date.isoformat()})"
            )
    return warnings


async def check_document_currency(
    crew_code: str, as_of: date, fetch_records: RecordsFetcher
) -> list[str]:
    """Look up the crew member's records and report expired ones."""
    if not crew_code:
        return []
    try:
        records = await fetch_records(crew_code.upper())
    except Exception:
        logger.warning(
            "Training records lookup failed for %s; skipping document check",
            crew_code, exc_info=True,
        )
        return []
    return expired_document_warnings(records, as_of)


def summarize_duty(
    flights: Iterable[Flight], crew_code: str, reference_date: date
) -> DutySummary:
    """Daily, last-7-days and month-to-date flight time for one crew member."""
    crew_code = crew_code.upper()
    week_start = reference_date - timedelta(days=7)
    month_start = reference_date.replace(day=1)
    summary = DutySummary(crew_code=crew_code)
    for flight in flights:
        if not flight.flight_time or not _flies(flight, crew_code):
            continue
        flown_on = date.fromisoformat(flight.date)
        if flown_on == reference_date:
            summary.daily += flight.flight_time
        if week_start <= flown_on <= reference_date:
            summary.weekly += flight.flight_time
        if month_start <= flown_on <= reference_date:
            summary.monthly += flight.flight_time
    return summary


class ComplianceValidator:
    """Recomputes the full warning set on every pilot / date / duration change.

    Each ``validate`` call takes a new token.  A call that finishes after
    a newer one has started returns ``None`` and leaves ``warnings``
    alone, so a slow lookup never overwrites fresher results.
    """

    def __init__(
        self,
        fetch_records: RecordsFetcher,
        settings: FeatureSettings | None = None,
    ):
        self._fetch_records = fetch_records
        self._settings = settings or FeatureSettings()
        self._latest_token = 0
        self.warnings: list[str] = []

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def next_token(self) -> int:
        self._latest_token += 1
        return self._latest_token

    async def validate(
        self,
        crew_code: str,
        flight_date: str,
        duration: float,
        flights: Iterable[Flight],
        editing_flight_id: str | None = None,
    ) -> list[str] | None:
        token = self.next_token()
        if not crew_code or not flight_date:
            return self._apply(token, [])

        warnings: list[str] = []
        if self._settings.enable_crew_fdp:
            warnings.extend(
                check_duty_period(
                    crew_code, flight_date, duration, list(flights), editing_flight_id
                )
            )
        if self._settings.enable_training_management:
            warnings.extend(
                await check_document_currency(
                    crew_code, date.fromisoformat(flight_date), self._fetch_records
                )
            )
        return self._apply(token, warnings)

    def _apply(self, token: int, warnings: list[str]) -> list[str] | None:
        if token != self._latest_token:
            logger.debug(
                "Discarding stale validation %d (latest %d)", token, self._latest_token
            )
            return None
        self.warnings = warnings
        return warnings
