"""NiceGUI web UI for Mapty."""

from __future__ import annotations

from typing import Callable

from nicegui import ui

from mapty.core.config import AppSettings
from mapty.core.controller import InteractionController
from mapty.core.ports import Geolocator
from mapty.ui.geolocation import BrowserGeolocator, StaticGeolocator
from mapty.ui.leaflet_view import LeafletMapView
from mapty.ui.render import workout_details
from mapty.workout.model import Coordinates, WorkoutKind, WorkoutRecord
from mapty.workout.store import JsonFileStore, WorkoutStore
from mapty.workout.validation import WorkoutInput

KIND_OPTIONS = {"running": "Running", "cycling": "Cycling"}

_HEAD_HTML = """
<style>
  body { background: #2d3439; color: #ececec; font-family: 'Manrope', Arial, sans-serif; }
  .mp-sidebar { background: #2d3439; }
  .mp-card { background: #42484d; border-radius: 5px; border-left: 5px solid #42484d; }
  .mp-card--running { border-left-color: #00c46a; }
  .mp-card--cycling { border-left-color: #ffb545; }
  .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid #00c46a; }
  .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid #ffb545; }
  .running-popup .leaflet-popup-content-wrapper,
  .cycling-popup .leaflet-popup-content-wrapper,
  .running-popup .leaflet-popup-tip,
  .cycling-popup .leaflet-popup-tip { background: #2d3439; color: #ececec; }
</style>
"""


class WorkoutFormView:
    def __init__(
        self,
        card: ui.card,
        kind: ui.select,
        distance: ui.number,
        duration: ui.number,
        cadence: ui.number,
        elevation: ui.number,
    ) -> None:
        self.card = card
        self.kind = kind
        self.distance = distance
        self.duration = duration
        self.cadence = cadence
        self.elevation = elevation

    def show(self) -> None:
        self.card.set_visibility(True)
        self.distance.run_method("focus")

    def hide(self) -> None:
        self.card.set_visibility(False)

    def reset(self) -> None:
        for field in (self.distance, self.duration, self.cadence, self.elevation):
            field.value = None

    def show_secondary_field(self, kind: WorkoutKind) -> None:
        self.cadence.set_visibility(kind == "running")
        self.elevation.set_visibility(kind == "cycling")

    def read(self) -> WorkoutInput:
        return WorkoutInput(
            kind=str(self.kind.value),
            distance=self.distance.value,
            duration=self.duration.value,
            cadence=self.cadence.value,
            elevation=self.elevation.value,
        )


class WorkoutListPanel:
    """Sidebar list, newest entry on top."""

    def __init__(self, container: ui.column, on_select: Callable[[str], None]) -> None:
        self._container = container
        self._on_select = on_select

    def render(self, record: WorkoutRecord) -> None:
        with self._container:
            with ui.card().classes(f"w-full cursor-pointer mp-card mp-card--{record.kind}") as card:
                ui.label(record.description).classes("text-base font-semibold")
                with ui.row().classes("w-full gap-4 flex-wrap"):
                    for icon, value, unit in workout_details(record):
                        with ui.row().classes("items-baseline gap-1"):
                            ui.label(icon)
                            ui.label(value).classes("text-sm font-medium")
                            ui.label(unit).classes("text-xs text-slate-400 uppercase")
        card.move(self._container, target_index=0)

        def on_pick(picked_id: str = record.id) -> None:
            self._on_select(picked_id)

        card.on("click", on_pick)

    def clear(self) -> None:
        self._container.clear()


def _notify(message: str) -> None:
    ui.notify(message, color="negative", close_button="OK", timeout=0)


def run_web_ui(
    settings: AppSettings | None = None,
    *,
    position: Coordinates | None = None,
) -> int:
    cfg = settings or AppSettings()

    @ui.page("/")
    async def index() -> None:
        ui.add_head_html(_HEAD_HTML)

        with ui.row().classes("w-full h-screen no-wrap gap-0"):
            with ui.column().classes("mp-sidebar w-1/3 h-full p-4 gap-3 overflow-auto"):
                ui.label(cfg.title).classes("text-2xl font-bold")
                with ui.card().classes("w-full mp-card") as form_card:
                    with ui.grid(columns=2).classes("w-full gap-2"):
                        kind_select = ui.select(KIND_OPTIONS, value="running", label="Type")
                        distance_input = ui.number("Distance (km)", placeholder="km")
                        duration_input = ui.number("Duration (min)", placeholder="min")
                        cadence_input = ui.number("Cadence (step/min)", placeholder="step/min")
                        elevation_input = ui.number("Elev Gain (m)", placeholder="meters")
                    submit_btn = ui.button("OK").props("color=positive")
                workouts_column = ui.column().classes("w-full gap-2")
                reset_btn = ui.button("Reset workouts").props("outline color=white")
                status_label = ui.label("Waiting for your position...").classes(
                    "text-xs text-slate-400"
                )
            map_container = ui.element("div").classes("w-2/3 h-full")

        form = WorkoutFormView(
            form_card,
            kind_select,
            distance_input,
            duration_input,
            cadence_input,
            elevation_input,
        )
        form.hide()
        form.show_secondary_field("running")

        def on_select(workout_id: str) -> None:
            controller.select(workout_id)

        geolocator: Geolocator = (
            StaticGeolocator(position) if position is not None else BrowserGeolocator()
        )
        controller = InteractionController(
            geolocator=geolocator,
            map_view=LeafletMapView(map_container, cfg),
            list_view=WorkoutListPanel(workouts_column, on_select),
            form=form,
            notify=_notify,
            store=WorkoutStore(JsonFileStore(cfg.storage_path), key=cfg.storage_key),
            settings=cfg,
        )

        def refresh_status() -> None:
            if controller.map_ready:
                status_label.text = "Click on the map to log a workout"
            else:
                status_label.text = "Map unavailable: no position"

        def on_submit() -> None:
            controller.submit(form.read())

        async def on_reset() -> None:
            await controller.reset()
            refresh_status()

        kind_select.on_value_change(lambda e: controller.change_kind(e.value))
        submit_btn.on_click(on_submit)
        for field in (distance_input, duration_input, cadence_input, elevation_input):
            field.on("keydown.enter", on_submit)
        reset_btn.on_click(on_reset)

        await ui.context.client.connected()
        await controller.start()
        refresh_status()

    ui.run(
        host=cfg.web_host,
        port=cfg.web_port,
        reload=False,
        title=cfg.title,
        show=False,
    )
    return 0
