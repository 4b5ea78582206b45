"""Capability set handed to the scheduling core.

The dashboard gates sub-modules per organization licence.  The core
never reads those flags from global state: callers pass a
``FeatureSettings`` value explicitly.
"""

import os

from pydantic import BaseModel, Field


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class FeatureSettings(BaseModel):
    enable_crew_fdp: bool = True
    enable_training_management: bool = True
    enable_fleet_checks: bool = True
    turnaround_minutes: int = Field(default=30, ge=0, le=24 * 60)

    @classmethod
    def from_env(cls) -> "FeatureSettings":
        """Build from ``FLIGHTOPS_*`` environment variables."""
        return cls(
            enable_crew_fdp=_env_flag("FLIGHTOPS_ENABLE_CREW_FDP", True),
            enable_training_management=_env_flag("FLIGHTOPS_ENABLE_TRAINING", True),
            enable_fleet_checks=_env_flag("FLIGHTOPS_ENABLE_FLEET_CHECKS", True),
            turnaround_minutes=int(os.environ.get("FLIGHTOPS_TURNAROUND_MINUTES", "30")),
        )
