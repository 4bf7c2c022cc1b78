"""Collaborator interfaces the controller talks to."""

from __future__ import annotations

from typing import Callable, Protocol

from mapty.workout.model import Coordinates, WorkoutKind, WorkoutRecord

ClickCallback = Callable[[Coordinates], None]


class PositionUnavailable(RuntimeError):
    """Raised when the current position cannot be obtained."""


class Geolocator(Protocol):
    async def current_position(self) -> Coordinates:
        """Resolve once with ``(latitude, longitude)`` or raise PositionUnavailable."""
        ...


class MapHandle(Protocol):
    def on_user_click(self, callback: ClickCallback) -> None: ...

    def place_marker(self, coordinates: Coordinates, label_text: str, style_class: str) -> None: ...

    def pan_to(self, coordinates: Coordinates, zoom_level: int) -> None: ...


class MapView(Protocol):
    async def initialize(self, center: Coordinates, zoom_level: int) -> MapHandle: ...


class WorkoutListView(Protocol):
    def render(self, record: WorkoutRecord) -> None: ...

    def clear(self) -> None: ...


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def reset(self) -> None: ...

    def show_secondary_field(self, kind: WorkoutKind) -> None: ...


Notifier = Callable[[str], None]
