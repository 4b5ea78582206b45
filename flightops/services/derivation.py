"""Derive related flights (next segment, return leg) from a source flight.

Every function here is pure: the source flight is never mutated and
malformed input degrades to a defined fallback instead of raising, so
the planner can call them to preview a row before it is inserted.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Iterable

from flightops.contracts.enums import FlightStatus
from flightops.contracts.flight import ROUTE_SEPARATOR, Flight, provisional_id
from flightops.services.timeutils import add_minutes, hours_to_minutes

DEFAULT_TURNAROUND_MINUTES = 30

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def increment_flight_number(flight_number: str) -> str:
    """``TGY100`` -> ``TGY101``. Numbers without trailing digits are returned as-is."""
    match = _TRAILING_DIGITS.search(flight_number or "")
    if match is None:
        return flight_number
    prefix = flight_number[: match.start()]
    return f"{prefix}{int(match.group(1)) + 1}"


def split_route(route: str | None) -> tuple[str, str]:
    """``OGL-KAI`` -> ``("OGL", "KAI")``; a single token has no destination."""
    route = route or ""
    if ROUTE_SEPARATOR in route:
        origin, _, destination = route.partition(ROUTE_SEPARATOR)
        return origin, destination
    return route, ""


def reverse_route(route: str | None) -> str:
    """``A-B`` -> ``B-A``. Empty when the route cannot be reversed."""
    if not route or ROUTE_SEPARATOR not in route:
        return ""
    origin, destination = split_route(route)
    if not origin or not destination:
        return ""
    return f"{destination}{ROUTE_SEPARATOR}{origin}"


def root_id(source: Flight) -> str | None:
    """Chain root of ``source``: derived flights never point at a mid-chain segment."""
    return source.parent_id or source.id


def _continuation_route(route: str) -> str:
    if not route:
        return ""
    origin, destination = split_route(route)
    start = destination if ROUTE_SEPARATOR in route else origin
    return f"{start}{ROUTE_SEPARATOR}" if start else ""


def derive_continuation_segment(source: Flight) -> Flight:
    """Next leg of a multi-stop itinerary, departing where ``source`` lands."""
    return Flight(
        id=provisional_id(),
        parent_id=root_id(source),
        date=source.date,
        flight_number=increment_flight_number(source.flight_number),
        route=_continuation_route(source.route),
        aircraft_registration=source.aircraft_registration,
        aircraft_type=source.aircraft_type,
        pic=source.pic,
        sic=source.sic,
        status=FlightStatus.SCHEDULED,
    )


def derive_return_leg(
    source: Flight, turnaround_minutes: int = DEFAULT_TURNAROUND_MINUTES
) -> Flight:
    """Reverse trip for the same client.

    ETD is the source ETD plus its flight time plus the turnaround, in
    whole minutes, wrapped to the same 24-hour clock.
    """
    offset = hours_to_minutes(source.flight_time) + turnaround_minutes
    return Flight(
        id=provisional_id(),
        parent_id=root_id(source),
        date=source.date,
        flight_number=increment_flight_number(source.flight_number),
        route=reverse_route(source.route),
        aircraft_registration=source.aircraft_registration,
        aircraft_type=source.aircraft_type,
        etd=add_minutes(source.etd, offset),
        customer=source.customer,
        customer_id=source.customer_id,
        pic=source.pic,
        sic=source.sic,
        status=FlightStatus.SCHEDULED,
        notes=f"Return of {source.flight_number}",
    )


def children_index(flights: Iterable[Flight]) -> dict[str, list[Flight]]:
    """Root ID -> derived flights, in input order."""
    index: dict[str, list[Flight]] = defaultdict(list)
    for flight in flights:
        if flight.parent_id and flight.parent_id != flight.id:
            index[flight.parent_id].append(flight)
    return dict(index)
