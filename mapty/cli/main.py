"""Command line entrypoint for Mapty."""

from __future__ import annotations

import argparse
from pathlib import Path

from mapty.core.config import AppSettings
from mapty.ui.render import format_workout_line
from mapty.workout.model import Coordinates
from mapty.workout.store import JsonFileStore, WorkoutStore


def parse_position(raw: str) -> Coordinates:
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("position must be LAT,LNG")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid position '{raw}'") from exc
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise argparse.ArgumentTypeError(f"position out of range '{raw}'")
    return lat, lng


def build_parser() -> argparse.ArgumentParser:
    defaults = AppSettings()
    parser = argparse.ArgumentParser(description="Mapty workout map")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch the web UI (default unless --list or --reset is given)",
    )
    parser.add_argument("--web-host", default=defaults.web_host, help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=defaults.web_port, help="Port for --ui-web")
    parser.add_argument(
        "--position",
        type=parse_position,
        default=None,
        metavar="LAT,LNG",
        help="Use a fixed start position instead of browser geolocation",
    )
    parser.add_argument(
        "--storage",
        type=Path,
        default=defaults.storage_path,
        help="Workout storage file",
    )
    parser.add_argument("--list", action="store_true", help="Print stored workouts")
    parser.add_argument("--reset", action="store_true", help="Remove all stored workouts")
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    return AppSettings(
        storage_path=args.storage,
        web_host=args.web_host,
        web_port=args.web_port,
    )


def run_list(store: WorkoutStore) -> int:
    records = store.load()
    if not records:
        print("No workouts stored")
        return 0
    for record in records:
        print(format_workout_line(record))
    return 0


def run_reset(store: WorkoutStore) -> int:
    store.clear()
    print("Stored workouts removed")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)
    store = WorkoutStore(JsonFileStore(settings.storage_path), key=settings.storage_key)

    if args.reset:
        run_reset(store)
    if args.list:
        run_list(store)
    if (args.reset or args.list) and not args.ui_web:
        return 0

    from mapty.ui.web_app import run_web_ui

    return run_web_ui(settings, position=args.position)


if __name__ == "__main__":
    raise SystemExit(main())
