"""
Utility script to run a single bee race headless at a fixed frame rate.

Usage:
    python scripts/run_race.py --duration 00:00:05 --seed 7
    python scripts/run_race.py --duration 30 --dump-json replays/race.json

Set BEE_DERBY_VERBOSE=1 (or pass --verbose) to print race events.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

# Ensure repo root is on sys.path when script is executed from anywhere
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from bee_derby.clock import duration_from_clock, parse_clock  # noqa: E402
from bee_derby.config import env_flag, get_config  # noqa: E402
from bee_derby.engine import RaceController, TelemetryCollector, run_headless  # noqa: E402


def _parse_duration(value: str) -> int:
    try:
        if ":" in value:
            return parse_clock(value)
        return duration_from_clock(seconds=value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a bee derby race without a renderer.")
    parser.add_argument(
        "--duration",
        type=_parse_duration,
        default=get_config("race.default_duration", 5),
        help="Race duration in seconds or as HH:MM:SS.",
    )
    parser.add_argument("--seed", type=int, help="Deterministic RNG seed.")
    parser.add_argument("--fps", type=int, default=get_config("race.fps", 60), help="Ticks per simulated second.")
    parser.add_argument("--dump-json", type=Path, help="Path to write per-tick telemetry JSON.")
    parser.add_argument("--verbose", action="store_true", help="Print race events.")
    return parser.parse_args(argv)


def _write_json(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    verbose = args.verbose or env_flag("BEE_DERBY_VERBOSE")
    telemetry = TelemetryCollector() if args.dump_json else None

    race = RaceController(args.duration, rng=args.seed, telemetry=telemetry, verbose=verbose)
    race.start()
    standings = run_headless(race, fps=args.fps)

    print("\nFinish Order:")
    for idx, body in enumerate(standings, start=1):
        marker = " (winner)" if body.competitor.is_winner else ""
        print(f"{idx}. {body.name} at x={body.position.x:.1f}{marker}")

    if args.dump_json:
        _write_json(args.dump_json, telemetry.as_dicts())
        print(f"Wrote {len(telemetry.frames)} frames to {args.dump_json}")


if __name__ == "__main__":
    main()
