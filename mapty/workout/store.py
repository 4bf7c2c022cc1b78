"""Local persistence for logged workouts."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Protocol

from mapty.workout.model import (
    CyclingDetails,
    RunningDetails,
    WorkoutDetails,
    WorkoutRecord,
)

STORAGE_KEY = "workouts"


def _default_storage_path() -> Path:
    return Path.home() / ".mapty" / "storage.json"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStore:
    """String values kept in a single JSON object on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_storage_path()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"[STORE] unreadable storage file {self.path}: {exc}")
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, ensure_ascii=True, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if items.pop(key, None) is not None:
            self._write(items)


def record_to_dict(record: WorkoutRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": record.id,
        "createdAt": record.created_at.isoformat(),
        "coordinates": [record.latitude, record.longitude],
        "distanceKm": record.distance_km,
        "durationMin": record.duration_min,
        "kind": record.kind,
        "description": record.description,
    }
    details = record.details
    if record.kind == "running" and isinstance(details, RunningDetails):
        payload["cadenceSpm"] = details.cadence_spm
        payload["paceMinPerKm"] = details.pace_min_per_km
    elif record.kind == "cycling" and isinstance(details, CyclingDetails):
        payload["elevationGainM"] = details.elevation_gain_m
        payload["speedKmPerH"] = details.speed_kmh
    else:
        raise ValueError(f"Workout {record.id} has mismatched kind and details")
    return payload


def _parse_created_at(raw: Any) -> datetime:
    text = str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def record_from_dict(item: dict[str, Any]) -> WorkoutRecord:
    """Rebuild a record from stored data only; the ``kind`` field picks the variant."""
    kind = item["kind"]
    details: WorkoutDetails
    if kind == "running":
        details = RunningDetails(
            cadence_spm=float(item["cadenceSpm"]),
            pace_min_per_km=float(item["paceMinPerKm"]),
        )
    elif kind == "cycling":
        details = CyclingDetails(
            elevation_gain_m=float(item["elevationGainM"]),
            speed_kmh=float(item["speedKmPerH"]),
        )
    else:
        raise ValueError(f"Unknown workout kind '{kind}'")

    description = item["description"]
    if not isinstance(description, str):
        raise ValueError("Workout description must be a string")

    lat, lng = item["coordinates"]
    return WorkoutRecord(
        id=str(item["id"]),
        created_at=_parse_created_at(item["createdAt"]),
        coordinates=(float(lat), float(lng)),
        distance_km=float(item["distanceKm"]),
        duration_min=float(item["durationMin"]),
        kind=kind,
        description=description,
        details=details,
        restored=True,
    )


class WorkoutStore:
    def __init__(self, backend: KeyValueStore | None = None, key: str = STORAGE_KEY) -> None:
        self.backend: KeyValueStore = backend if backend is not None else MemoryStore()
        self.key = key

    def save(self, records: Iterable[WorkoutRecord]) -> None:
        payload = [record_to_dict(record) for record in records]
        self.backend.set_item(self.key, json.dumps(payload, ensure_ascii=True))

    def load(self) -> list[WorkoutRecord]:
        raw = self.backend.get_item(self.key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            print(f"[STORE] ignoring unreadable workout data: {exc}")
            return []
        if not isinstance(data, list):
            print("[STORE] ignoring workout data that is not a list")
            return []

        out: list[WorkoutRecord] = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                continue
            try:
                out.append(record_from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                print(f"[STORE] skipping workout #{index + 1}: {exc!r}")
                continue
        return out

    def clear(self) -> None:
        self.backend.remove_item(self.key)
