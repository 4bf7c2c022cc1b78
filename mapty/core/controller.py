"""Interaction controller: map clicks to logged, rendered and stored workouts."""

from __future__ import annotations

from mapty.core.config import AppSettings
from mapty.core.ports import (
    FormView,
    Geolocator,
    MapHandle,
    MapView,
    Notifier,
    PositionUnavailable,
    WorkoutListView,
)
from mapty.core.state import ControllerState, SessionState
from mapty.ui.render import marker_label, popup_class
from mapty.workout.model import Coordinates, WorkoutKind, WorkoutRecord
from mapty.workout.store import WorkoutStore
from mapty.workout.validation import InvalidInput, WorkoutInput, build_record, validate_input

POSITION_UNAVAILABLE_MESSAGE = "We're unable to get your position"


class InteractionController:
    def __init__(
        self,
        *,
        geolocator: Geolocator,
        map_view: MapView,
        list_view: WorkoutListView,
        form: FormView,
        notify: Notifier,
        store: WorkoutStore | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self._geolocator = geolocator
        self._map_view = map_view
        self._list_view = list_view
        self._form = form
        self._notify = notify
        self._store = store or WorkoutStore()
        self._settings = settings or AppSettings()
        self._session = SessionState()
        self._map: MapHandle | None = None

    @property
    def state(self) -> ControllerState:
        return self._session.state

    @property
    def workouts(self) -> tuple[WorkoutRecord, ...]:
        return tuple(self._session.workouts)

    @property
    def pending_coordinates(self) -> Coordinates | None:
        return self._session.pending_coordinates

    @property
    def map_ready(self) -> bool:
        return self._map is not None

    async def start(self) -> bool:
        """Request the position once, then bring up the map and stored workouts.

        Returns False when no position could be obtained; the controller then
        stays without a map until the session is restarted.
        """
        if self._session.state is not ControllerState.AWAITING_POSITION or self._map is not None:
            raise RuntimeError("Session already started")

        session = self._session
        try:
            position = await self._geolocator.current_position()
        except PositionUnavailable as exc:
            if session is not self._session:
                return False
            print(f"[GEO] position unavailable: {exc}")
            self._notify(POSITION_UNAVAILABLE_MESSAGE)
            return False
        if session is not self._session:
            print("[APP] dropping position for a session that was reset")
            return False

        session.position = position
        session.state = ControllerState.MAP_READY
        handle = await self._map_view.initialize(position, self._settings.zoom_level)
        if session is not self._session:
            return False
        self._map = handle

        self._session.workouts = self._store.load()
        for record in self._session.workouts:
            self._render(record)
        if self._session.workouts:
            print(f"[APP] restored {len(self._session.workouts)} workout(s)")

        self._map.on_user_click(self.handle_map_click)
        self._session.state = ControllerState.IDLE
        return True

    def handle_map_click(self, coordinates: Coordinates) -> None:
        if self._session.state not in (ControllerState.IDLE, ControllerState.PENDING_CLICK):
            return
        self._session.pending_coordinates = (float(coordinates[0]), float(coordinates[1]))
        self._session.state = ControllerState.PENDING_CLICK
        self._form.show()

    def change_kind(self, kind: WorkoutKind) -> None:
        self._form.show_secondary_field(kind)

    def submit(self, data: WorkoutInput) -> WorkoutRecord | None:
        pending = self._session.pending_coordinates
        if self._session.state is not ControllerState.PENDING_CLICK or pending is None:
            print("[APP] submit ignored: no pending map click")
            return None

        self._session.state = ControllerState.SUBMITTING
        try:
            validated = validate_input(data)
        except InvalidInput as exc:
            self._session.state = ControllerState.PENDING_CLICK
            self._notify(str(exc))
            return None

        record = build_record(validated, pending)
        self._session.workouts.append(record)

        self._form.hide()
        self._form.reset()
        try:
            self._render(record)
            self._store.save(self._session.workouts)
        finally:
            self._session.pending_coordinates = None
            self._session.state = ControllerState.IDLE
        return record

    def select(self, workout_id: str) -> WorkoutRecord | None:
        if self._map is None:
            return None
        record = next((w for w in self._session.workouts if w.id == workout_id), None)
        if record is None:
            return None
        self._map.pan_to(record.coordinates, self._settings.zoom_level)
        record.select()
        return record

    async def reset(self) -> bool:
        """Drop stored and in-memory workouts and start a fresh session."""
        self._store.clear()
        self._list_view.clear()
        self._form.hide()
        self._form.reset()
        self._map = None
        self._session = SessionState()
        print("[APP] session reset")
        return await self.start()

    def _render(self, record: WorkoutRecord) -> None:
        self._list_view.render(record)
        if self._map is not None:
            self._map.place_marker(
                record.coordinates, marker_label(record), popup_class(record.kind)
            )
