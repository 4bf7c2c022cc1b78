"""Workout form input coercion and validation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from mapty.workout.model import (
    Coordinates,
    WorkoutKind,
    WorkoutRecord,
    new_cycling,
    new_running,
)

INVALID_INPUT_MESSAGE = "Inputs have to be positive numbers"


class InvalidInput(ValueError):
    """Raised when submitted workout fields are not usable numbers."""


@dataclass(frozen=True)
class WorkoutInput:
    kind: str
    distance: Any = None
    duration: Any = None
    cadence: Any = None
    elevation: Any = None


@dataclass(frozen=True)
class ValidatedWorkout:
    kind: WorkoutKind
    distance_km: float
    duration_min: float
    secondary: float


def to_number(raw: Any) -> float:
    """Coerce a form value the way the browser form does: blank is 0, junk is NaN."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


def all_finite(*values: float) -> bool:
    return all(math.isfinite(value) for value in values)


def all_positive(*values: float) -> bool:
    return all(value > 0 for value in values)


def validate_input(data: WorkoutInput) -> ValidatedWorkout:
    distance = to_number(data.distance)
    duration = to_number(data.duration)

    if data.kind == "running":
        cadence = to_number(data.cadence)
        if not all_finite(distance, duration, cadence) or not all_positive(
            distance, duration, cadence
        ):
            raise InvalidInput(INVALID_INPUT_MESSAGE)
        return ValidatedWorkout("running", distance, duration, cadence)

    if data.kind == "cycling":
        elevation = to_number(data.elevation)
        # Elevation gain is only required to be finite.
        if not all_finite(distance, duration, elevation) or not all_positive(
            distance, duration
        ):
            raise InvalidInput(INVALID_INPUT_MESSAGE)
        return ValidatedWorkout("cycling", distance, duration, elevation)

    raise InvalidInput(f"Unsupported workout kind '{data.kind}'")


def build_record(validated: ValidatedWorkout, coordinates: Coordinates) -> WorkoutRecord:
    if validated.kind == "running":
        return new_running(
            coordinates,
            validated.distance_km,
            validated.duration_min,
            validated.secondary,
        )
    return new_cycling(
        coordinates,
        validated.distance_km,
        validated.duration_min,
        validated.secondary,
    )
