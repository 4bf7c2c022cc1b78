"""Shared runtime state for the interaction controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from mapty.workout.model import Coordinates, WorkoutRecord


class ControllerState(str, Enum):
    AWAITING_POSITION = "awaiting_position"
    MAP_READY = "map_ready"
    IDLE = "idle"
    PENDING_CLICK = "pending_click"
    SUBMITTING = "submitting"


@dataclass
class SessionState:
    state: ControllerState = ControllerState.AWAITING_POSITION
    position: Coordinates | None = None
    pending_coordinates: Coordinates | None = None
    workouts: list[WorkoutRecord] = field(default_factory=list)
