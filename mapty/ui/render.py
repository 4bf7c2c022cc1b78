"""Display strings for workout list entries and map markers."""

from __future__ import annotations

from mapty.workout.model import CyclingDetails, RunningDetails, WorkoutRecord

RUNNING_ICON = "🏃‍♂️"
CYCLING_ICON = "🚴‍♀️"

DetailRow = tuple[str, str, str]


def _fmt_plain(value: float) -> str:
    return f"{value:g}"


def _fmt_number(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}"


def workout_icon(kind: str) -> str:
    return RUNNING_ICON if kind == "running" else CYCLING_ICON


def popup_class(kind: str) -> str:
    return f"{kind}-popup"


def marker_label(record: WorkoutRecord) -> str:
    return f"{workout_icon(record.kind)} {record.description}"


def workout_details(record: WorkoutRecord) -> list[DetailRow]:
    rows: list[DetailRow] = [
        (workout_icon(record.kind), _fmt_plain(record.distance_km), "km"),
        ("⏱", _fmt_plain(record.duration_min), "min"),
    ]
    details = record.details
    if record.kind == "running" and isinstance(details, RunningDetails):
        rows.append(("⚡️", _fmt_number(details.pace_min_per_km), "min/km"))
        rows.append(("🦶🏼", _fmt_plain(details.cadence_spm), "spm"))
    elif record.kind == "cycling" and isinstance(details, CyclingDetails):
        rows.append(("⚡️", _fmt_number(details.speed_kmh), "km/h"))
        rows.append(("⛰", _fmt_plain(details.elevation_gain_m), "m"))
    return rows


def format_workout_line(record: WorkoutRecord) -> str:
    parts = [f"{value} {unit}" for _icon, value, unit in workout_details(record)]
    lat, lng = record.coordinates
    summary = " | ".join(parts)
    return f"{record.id:<10} {record.description:<22} {summary} @ {lat:.4f},{lng:.4f}"
