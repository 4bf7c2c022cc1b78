"""Map view backed by NiceGUI's Leaflet element."""

from __future__ import annotations

from typing import Any

from nicegui import events, ui

from mapty.core.config import AppSettings
from mapty.core.ports import ClickCallback
from mapty.workout.model import Coordinates

POPUP_OPTIONS: dict[str, Any] = {
    "maxWidth": 250,
    "minWidth": 100,
    "autoClose": False,
    "closeOnClick": False,
}


class LeafletMapHandle:
    def __init__(self, leaflet: ui.leaflet) -> None:
        self.leaflet = leaflet

    def on_user_click(self, callback: ClickCallback) -> None:
        def _on_click(event: events.GenericEventArguments) -> None:
            latlng = event.args["latlng"]
            callback((float(latlng["lat"]), float(latlng["lng"])))

        self.leaflet.on("map-click", _on_click)

    def place_marker(self, coordinates: Coordinates, label_text: str, style_class: str) -> None:
        marker = self.leaflet.marker(latlng=coordinates)
        marker.run_method("bindPopup", label_text, {**POPUP_OPTIONS, "className": style_class})
        marker.run_method("openPopup")

    def pan_to(self, coordinates: Coordinates, zoom_level: int) -> None:
        self.leaflet.run_map_method(
            "setView",
            list(coordinates),
            zoom_level,
            {"animate": True, "pan": {"duration": 1}},
        )


class LeafletMapView:
    def __init__(self, container: ui.element, settings: AppSettings | None = None) -> None:
        self._container = container
        self._settings = settings or AppSettings()

    async def initialize(self, center: Coordinates, zoom_level: int) -> LeafletMapHandle:
        self._container.clear()
        with self._container:
            leaflet = ui.leaflet(center=center, zoom=zoom_level).classes("w-full h-full")
        leaflet.clear_layers()
        leaflet.tile_layer(
            url_template=self._settings.tile_url,
            options={"attribution": self._settings.tile_attribution},
        )
        await leaflet.initialized()
        print(f"[MAP] ready at {center[0]:.5f},{center[1]:.5f} zoom={zoom_level}")
        return LeafletMapHandle(leaflet)
