"""Base classes and shared types for flight-operations contracts.

Conventions (all contracts and API responses):
- **Dates**: ISO calendar dates ``YYYY-MM-DD`` (schedule days are local)
- **Clock times**: local ``HH:MM`` strings, empty string when unknown
- **Durations**: decimal hours, suffix-free (``flight_time=1.5``)
- **Airframe hours**: decimal hours since new (``current_hours``)
- **Routes**: two airport codes joined by ``-``, direction-significant
"""

from datetime import date
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


class FirestoreModel(BaseModel):
    """Base model with Firestore-friendly serialization.

    - Enums serialize as string values (Firestore stores strings).
    - ``to_firestore()`` produces a JSON-safe dict (dates as ISO 8601).
    - ``from_firestore()`` hydrates from a Firestore document dict.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_firestore(self) -> dict[str, Any]:
        """Dump to Firestore-compatible dict."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_firestore(cls, data: dict[str, Any]) -> "FirestoreModel":
        """Create model instance from Firestore document dict."""
        return cls.model_validate(data)


def _calendar_date(value: str) -> str:
    # The pattern admits impossible days such as 2024-02-30
    date.fromisoformat(value)
    return value


IsoDate = Annotated[
    str,
    Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"),
    AfterValidator(_calendar_date),
]
