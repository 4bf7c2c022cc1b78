"""Workout domain models."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Union

WorkoutKind = Literal["running", "cycling"]
Coordinates = tuple[float, float]

WORKOUT_KINDS: tuple[WorkoutKind, ...] = ("running", "cycling")

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class RunningDetails:
    cadence_spm: float
    pace_min_per_km: float


@dataclass(frozen=True)
class CyclingDetails:
    elevation_gain_m: float
    speed_kmh: float


WorkoutDetails = Union[RunningDetails, CyclingDetails]


@dataclass(eq=False)
class WorkoutRecord:
    """One logged workout.

    Fields other than ``interaction_count`` are never reassigned after
    construction. ``restored`` marks records rebuilt from stored data; those
    keep their stored description and metric and do not count selections.
    """

    id: str
    created_at: datetime
    coordinates: Coordinates
    distance_km: float
    duration_min: float
    kind: WorkoutKind
    description: str
    details: WorkoutDetails
    interaction_count: int = 0
    restored: bool = field(default=False, repr=False)

    @property
    def latitude(self) -> float:
        return self.coordinates[0]

    @property
    def longitude(self) -> float:
        return self.coordinates[1]

    @property
    def metric_value(self) -> float:
        if self.kind == "running":
            return self.details.pace_min_per_km  # type: ignore[union-attr]
        return self.details.speed_kmh  # type: ignore[union-attr]

    def select(self) -> bool:
        if self.restored:
            return False
        self.interaction_count += 1
        return True


def generate_workout_id(now_ms: int | None = None) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return str(stamp * random.randint(1, 10))[-10:]


def describe(kind: str, created_at: datetime) -> str:
    return f"{kind[:1].upper()}{kind[1:]} on {MONTHS[created_at.month - 1]} {created_at.day}"


def _now() -> datetime:
    return datetime.now().astimezone()


def new_running(
    coordinates: Coordinates,
    distance_km: float,
    duration_min: float,
    cadence_spm: float,
    *,
    created_at: datetime | None = None,
    workout_id: str | None = None,
) -> WorkoutRecord:
    created = created_at or _now()
    return WorkoutRecord(
        id=workout_id or generate_workout_id(),
        created_at=created,
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        distance_km=distance_km,
        duration_min=duration_min,
        kind="running",
        description=describe("running", created),
        details=RunningDetails(
            cadence_spm=cadence_spm,
            pace_min_per_km=duration_min / distance_km,
        ),
    )


def new_cycling(
    coordinates: Coordinates,
    distance_km: float,
    duration_min: float,
    elevation_gain_m: float,
    *,
    created_at: datetime | None = None,
    workout_id: str | None = None,
) -> WorkoutRecord:
    created = created_at or _now()
    return WorkoutRecord(
        id=workout_id or generate_workout_id(),
        created_at=created,
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        distance_km=distance_km,
        duration_min=duration_min,
        kind="cycling",
        description=describe("cycling", created),
        details=CyclingDetails(
            elevation_gain_m=elevation_gain_m,
            speed_kmh=distance_km / (duration_min / 60),
        ),
    )
