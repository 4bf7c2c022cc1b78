"""Position sources for the map session."""

from __future__ import annotations

from typing import Any

from nicegui import ui

from mapty.core.ports import PositionUnavailable
from mapty.workout.model import Coordinates

_GEOLOCATION_JS = """
return await new Promise((resolve) => {
    if (!navigator.geolocation) {
        resolve(null);
        return;
    }
    navigator.geolocation.getCurrentPosition(
        (position) => resolve({
            latitude: position.coords.latitude,
            longitude: position.coords.longitude,
        }),
        () => resolve(null),
    );
});
"""


class BrowserGeolocator:
    """Asks the connected browser for its position, once per call.

    The timeout only covers a client that went away; a permission prompt left
    open for minutes still resolves normally.
    """

    def __init__(self, timeout_sec: float = 3600.0) -> None:
        self._timeout_sec = timeout_sec

    async def current_position(self) -> Coordinates:
        try:
            response: Any = await ui.run_javascript(_GEOLOCATION_JS, timeout=self._timeout_sec)
        except TimeoutError as exc:
            raise PositionUnavailable("browser did not answer the position request") from exc
        if not isinstance(response, dict):
            raise PositionUnavailable("position request denied or failed")
        try:
            return float(response["latitude"]), float(response["longitude"])
        except (KeyError, TypeError, ValueError) as exc:
            raise PositionUnavailable(f"malformed position payload: {response!r}") from exc


class StaticGeolocator:
    def __init__(self, position: Coordinates) -> None:
        self._position = position

    async def current_position(self) -> Coordinates:
        return self._position
