from __future__ import annotations

import asyncio
import json
from datetime import datetime

import pytest

from mapty.core.config import AppSettings
from mapty.core.controller import POSITION_UNAVAILABLE_MESSAGE, InteractionController
from mapty.core.ports import ClickCallback, PositionUnavailable
from mapty.core.state import ControllerState
from mapty.workout.model import MONTHS, Coordinates, WorkoutKind, WorkoutRecord, new_running
from mapty.workout.store import MemoryStore, WorkoutStore
from mapty.workout.validation import INVALID_INPUT_MESSAGE, WorkoutInput


class FakeGeolocator:
    def __init__(self, position: Coordinates | None) -> None:
        self.position = position
        self.calls = 0

    async def current_position(self) -> Coordinates:
        self.calls += 1
        if self.position is None:
            raise PositionUnavailable("denied")
        return self.position


class GatedGeolocator(FakeGeolocator):
    def __init__(self, position: Coordinates | None) -> None:
        super().__init__(position)
        self.gate = asyncio.Event()

    async def current_position(self) -> Coordinates:
        self.calls += 1
        await self.gate.wait()
        if self.position is None:
            raise PositionUnavailable("denied")
        return self.position


class FailingWriteStore(MemoryStore):
    def set_item(self, key: str, value: str) -> None:
        raise OSError("disk full")


class FakeMapHandle:
    def __init__(self, center: Coordinates, zoom_level: int) -> None:
        self.center = center
        self.zoom_level = zoom_level
        self.click_callback: ClickCallback | None = None
        self.markers: list[tuple[Coordinates, str, str]] = []
        self.pans: list[tuple[Coordinates, int]] = []

    def on_user_click(self, callback: ClickCallback) -> None:
        self.click_callback = callback

    def place_marker(self, coordinates: Coordinates, label_text: str, style_class: str) -> None:
        self.markers.append((coordinates, label_text, style_class))

    def pan_to(self, coordinates: Coordinates, zoom_level: int) -> None:
        self.pans.append((coordinates, zoom_level))

    def click(self, coordinates: Coordinates) -> None:
        assert self.click_callback is not None
        self.click_callback(coordinates)


class FakeMapView:
    def __init__(self) -> None:
        self.handles: list[FakeMapHandle] = []

    async def initialize(self, center: Coordinates, zoom_level: int) -> FakeMapHandle:
        handle = FakeMapHandle(center, zoom_level)
        self.handles.append(handle)
        return handle

    @property
    def handle(self) -> FakeMapHandle:
        return self.handles[-1]


class FakeListView:
    def __init__(self) -> None:
        self.rendered: list[WorkoutRecord] = []

    def render(self, record: WorkoutRecord) -> None:
        self.rendered.append(record)

    def clear(self) -> None:
        self.rendered.clear()


class FakeForm:
    def __init__(self) -> None:
        self.visible = False
        self.resets = 0
        self.secondary: WorkoutKind = "running"

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def reset(self) -> None:
        self.resets += 1

    def show_secondary_field(self, kind: WorkoutKind) -> None:
        self.secondary = kind


class Harness:
    def __init__(
        self,
        position: Coordinates | None = (40.0, -73.0),
        backend: MemoryStore | None = None,
        geolocator: FakeGeolocator | None = None,
    ) -> None:
        self.geolocator = geolocator or FakeGeolocator(position)
        self.map_view = FakeMapView()
        self.list_view = FakeListView()
        self.form = FakeForm()
        self.alerts: list[str] = []
        self.backend = backend or MemoryStore()
        self.controller = InteractionController(
            geolocator=self.geolocator,
            map_view=self.map_view,
            list_view=self.list_view,
            form=self.form,
            notify=self.alerts.append,
            store=WorkoutStore(self.backend),
            settings=AppSettings(),
        )

    def stored(self) -> list[dict[str, object]]:
        raw = self.backend.get_item("workouts")
        return json.loads(raw) if raw is not None else []


def _started(
    position: Coordinates | None = (40.0, -73.0),
    backend: MemoryStore | None = None,
) -> Harness:
    harness = Harness(position, backend)
    asyncio.run(harness.controller.start())
    return harness


def test_start_brings_up_map_at_position() -> None:
    h = _started()

    assert h.controller.state is ControllerState.IDLE
    assert h.controller.map_ready
    assert h.geolocator.calls == 1
    assert h.map_view.handle.center == (40.0, -73.0)
    assert h.map_view.handle.zoom_level == 13
    assert h.map_view.handle.click_callback is not None
    assert h.controller.workouts == ()


def test_position_failure_alerts_and_stays_without_map() -> None:
    h = Harness(position=None)

    started = asyncio.run(h.controller.start())

    assert started is False
    assert h.alerts == [POSITION_UNAVAILABLE_MESSAGE]
    assert h.controller.state is ControllerState.AWAITING_POSITION
    assert not h.controller.map_ready
    assert h.map_view.handles == []
    assert h.controller.select("anything") is None


def test_start_twice_is_rejected() -> None:
    h = _started()
    with pytest.raises(RuntimeError):
        asyncio.run(h.controller.start())


def test_map_click_then_running_submission() -> None:
    h = _started()

    h.map_view.handle.click((40.1, -73.1))
    assert h.controller.state is ControllerState.PENDING_CLICK
    assert h.controller.pending_coordinates == (40.1, -73.1)
    assert h.form.visible

    before = datetime.now().astimezone()
    record = h.controller.submit(WorkoutInput("running", 5, 25, cadence=178))
    after = datetime.now().astimezone()

    assert record is not None
    assert h.controller.workouts == (record,)
    assert record.coordinates == (40.1, -73.1)
    assert record.metric_value == pytest.approx(5.0)
    assert record.description in {
        f"Running on {MONTHS[moment.month - 1]} {moment.day}" for moment in (before, after)
    }

    assert h.list_view.rendered == [record]
    assert h.map_view.handle.markers == [
        ((40.1, -73.1), f"🏃‍♂️ {record.description}", "running-popup")
    ]
    assert len(h.stored()) == 1
    assert h.stored()[0]["id"] == record.id

    assert h.controller.state is ControllerState.IDLE
    assert h.controller.pending_coordinates is None
    assert not h.form.visible
    assert h.form.resets == 1


def test_cycling_with_negative_elevation_is_accepted() -> None:
    h = _started()
    h.map_view.handle.click((40.1, -73.1))
    h.controller.submit(WorkoutInput("running", 5, 25, cadence=178))

    h.map_view.handle.click((40.2, -73.2))
    ride = h.controller.submit(WorkoutInput("cycling", 10, 40, elevation=-5))

    assert ride is not None
    assert ride.kind == "cycling"
    assert ride.metric_value == pytest.approx(15.0)
    assert [w.kind for w in h.controller.workouts] == ["running", "cycling"]
    assert [item["kind"] for item in h.stored()] == ["running", "cycling"]
    assert h.map_view.handle.markers[-1][2] == "cycling-popup"


def test_invalid_submission_keeps_pending_click() -> None:
    h = _started()
    h.map_view.handle.click((40.1, -73.1))

    result = h.controller.submit(WorkoutInput("running", 5, 25, cadence=0))

    assert result is None
    assert h.alerts == [INVALID_INPUT_MESSAGE]
    assert h.controller.state is ControllerState.PENDING_CLICK
    assert h.controller.pending_coordinates == (40.1, -73.1)
    assert h.form.visible
    assert h.form.resets == 0
    assert h.controller.workouts == ()
    assert h.list_view.rendered == []
    assert h.backend.get_item("workouts") is None

    retry = h.controller.submit(WorkoutInput("running", 5, 25, cadence=170))
    assert retry is not None
    assert h.controller.state is ControllerState.IDLE


def test_submit_without_click_is_ignored() -> None:
    h = _started()
    assert h.controller.submit(WorkoutInput("running", 5, 25, cadence=178)) is None
    assert h.controller.workouts == ()
    assert h.alerts == []


def test_second_click_replaces_pending_coordinates() -> None:
    h = _started()
    h.map_view.handle.click((1.0, 1.0))
    h.map_view.handle.click((2.0, 2.0))

    record = h.controller.submit(WorkoutInput("cycling", 10, 40, elevation=0))

    assert record is not None
    assert record.coordinates == (2.0, 2.0)


def test_change_kind_toggles_secondary_field_only() -> None:
    h = _started()
    h.controller.change_kind("cycling")
    assert h.form.secondary == "cycling"
    assert h.controller.state is ControllerState.IDLE
    h.controller.change_kind("running")
    assert h.form.secondary == "running"


def test_reload_renders_persisted_workouts() -> None:
    backend = MemoryStore()
    first = _started(backend=backend)
    first.map_view.handle.click((40.1, -73.1))
    original = first.controller.submit(WorkoutInput("running", 5, 25, cadence=178))
    assert original is not None

    second = _started(backend=backend)

    assert len(second.controller.workouts) == 1
    restored = second.controller.workouts[0]
    assert restored.id == original.id
    assert restored.description == original.description
    assert second.list_view.rendered == [restored]
    assert second.map_view.handle.markers == [
        ((40.1, -73.1), f"🏃‍♂️ {original.description}", "running-popup")
    ]
    assert second.controller.state is ControllerState.IDLE


def test_select_pans_and_counts_only_fresh_records() -> None:
    backend = MemoryStore()
    seed = new_running((10.0, 20.0), 5, 25, 178, workout_id="old")
    WorkoutStore(backend).save([seed])

    h = _started(backend=backend)
    h.map_view.handle.click((40.1, -73.1))
    fresh = h.controller.submit(WorkoutInput("running", 5, 25, cadence=178))
    assert fresh is not None

    restored = h.controller.select("old")
    selected = h.controller.select(fresh.id)

    assert restored is not None and restored.interaction_count == 0
    assert selected is fresh and fresh.interaction_count == 1
    assert h.map_view.handle.pans == [((10.0, 20.0), 13), ((40.1, -73.1), 13)]
    assert h.controller.select("missing") is None


def test_reset_clears_storage_and_restarts() -> None:
    h = _started()
    h.map_view.handle.click((40.1, -73.1))
    h.controller.submit(WorkoutInput("running", 5, 25, cadence=178))
    h.map_view.handle.click((40.2, -73.2))

    restarted = asyncio.run(h.controller.reset())

    assert restarted is True
    assert h.backend.get_item("workouts") is None
    assert h.controller.workouts == ()
    assert h.controller.pending_coordinates is None
    assert h.controller.state is ControllerState.IDLE
    assert h.list_view.rendered == []
    assert len(h.map_view.handles) == 2
    assert h.map_view.handle.markers == []
    assert h.geolocator.calls == 2
    assert WorkoutStore(h.backend).load() == []


def test_reset_after_position_failure_retries_position() -> None:
    h = Harness(position=None)
    asyncio.run(h.controller.start())

    h.geolocator.position = (48.85, 2.35)
    assert asyncio.run(h.controller.reset()) is True
    assert h.controller.map_ready
    assert h.map_view.handle.center == (48.85, 2.35)


def _reset_while_position_pending(h: Harness) -> tuple[bool, bool]:
    async def _run() -> tuple[bool, bool]:
        first = asyncio.create_task(h.controller.start())
        await asyncio.sleep(0)
        second = asyncio.create_task(h.controller.reset())
        await asyncio.sleep(0)
        assert isinstance(h.geolocator, GatedGeolocator)
        h.geolocator.gate.set()
        return await first, await second

    return asyncio.run(_run())


def test_reset_during_pending_position_keeps_single_session() -> None:
    backend = MemoryStore()
    WorkoutStore(backend).save([new_running((10.0, 20.0), 5, 25, 178, workout_id="old")])
    h = Harness(backend=backend, geolocator=GatedGeolocator((40.0, -73.0)))

    first, second = _reset_while_position_pending(h)

    assert first is False
    assert second is True
    assert h.geolocator.calls == 2
    assert len(h.map_view.handles) == 1
    assert h.map_view.handle.markers == []
    assert h.list_view.rendered == []
    assert h.controller.state is ControllerState.IDLE
    assert h.alerts == []


def test_reset_during_pending_position_alerts_once_on_failure() -> None:
    h = Harness(geolocator=GatedGeolocator(None))

    first, second = _reset_while_position_pending(h)

    assert (first, second) == (False, False)
    assert h.alerts == [POSITION_UNAVAILABLE_MESSAGE]
    assert h.map_view.handles == []


def test_failed_save_still_returns_to_idle() -> None:
    h = _started(backend=FailingWriteStore())
    h.map_view.handle.click((40.1, -73.1))

    with pytest.raises(OSError):
        h.controller.submit(WorkoutInput("running", 5, 25, cadence=178))

    assert h.controller.state is ControllerState.IDLE
    assert h.controller.pending_coordinates is None
    h.map_view.handle.click((40.2, -73.2))
    assert h.controller.state is ControllerState.PENDING_CLICK
