"""Runtime settings for the workout map app."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from mapty.workout.store import STORAGE_KEY


def _default_data_dir() -> Path:
    return Path.home() / ".mapty"


@dataclass(frozen=True)
class AppSettings:
    zoom_level: int = 13
    storage_key: str = STORAGE_KEY
    storage_path: Path = field(default_factory=lambda: _default_data_dir() / "storage.json")
    web_host: str = "127.0.0.1"
    web_port: int = 8088
    title: str = "Mapty"
    tile_url: str = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
    tile_attribution: str = (
        '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
    )
