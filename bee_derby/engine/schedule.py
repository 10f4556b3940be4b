from __future__ import annotations

import math
import random
from typing import Dict, List, Optional, Tuple

from bee_derby.config import BALANCE_CONFIG

from .data_models import Schedule, ScheduleEntry, require_positive_duration

DEFAULT_REFERENCE_DISTANCE = 2100.0
DEFAULT_WINNER_DISTANCE = 2100.0
DEFAULT_BASE_DISTANCE = 1900.0
DEFAULT_VARIABLE_RANGE = 500.0
DEFAULT_VELOCITY_JITTER = (0.5, 1.5)
DEFAULT_TIME_JITTER = (0.5, 1.5)
DEFAULT_FINISH_DISTANCE = 2200.0
MIN_REMAINING_FRACTION = 1e-9


def _schedule_config() -> Dict[str, object]:
    if not isinstance(BALANCE_CONFIG, dict):
        return {}
    config = BALANCE_CONFIG.get("schedule")
    if not isinstance(config, dict):
        return {}
    return config


def _finish_line_distance() -> float:
    if not isinstance(BALANCE_CONFIG, dict):
        return DEFAULT_FINISH_DISTANCE
    course = BALANCE_CONFIG.get("course")
    if not isinstance(course, dict):
        return DEFAULT_FINISH_DISTANCE
    return float(course.get("finish_line_x", DEFAULT_FINISH_DISTANCE))


def _jitter_range(value: object, fallback: Tuple[float, float]) -> Tuple[float, float]:
    if value is None:
        return fallback
    try:
        low, high = (float(item) for item in value)  # type: ignore[union-attr]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Jitter range must be a [low, high] pair, got {value!r}") from exc
    if not 0 < low <= high:
        raise ValueError(f"Jitter range must satisfy 0 < low <= high, got {value!r}")
    return (low, high)


class ScheduleGenerator:
    """Builds per-competitor velocity schedules that close exactly on the target distance."""

    def __init__(
        self,
        reference_distance: Optional[float] = None,
        rng: Optional[random.Random] = None,
        winner_distance: Optional[float] = None,
        base_distance: Optional[float] = None,
        variable_range: Optional[float] = None,
        velocity_jitter: Optional[Tuple[float, float]] = None,
        time_jitter: Optional[Tuple[float, float]] = None,
        finish_distance: Optional[float] = None,
    ) -> None:
        config = _schedule_config()
        self.reference_distance = float(
            reference_distance if reference_distance is not None
            else config.get("reference_distance", DEFAULT_REFERENCE_DISTANCE)
        )
        self.winner_distance = float(
            winner_distance if winner_distance is not None
            else config.get("winner_distance", DEFAULT_WINNER_DISTANCE)
        )
        self.base_distance = float(
            base_distance if base_distance is not None
            else config.get("base_distance", DEFAULT_BASE_DISTANCE)
        )
        self.variable_range = float(
            variable_range if variable_range is not None
            else config.get("variable_range", DEFAULT_VARIABLE_RANGE)
        )
        self.velocity_jitter = _jitter_range(
            velocity_jitter if velocity_jitter is not None else config.get("velocity_jitter"),
            DEFAULT_VELOCITY_JITTER,
        )
        self.time_jitter = _jitter_range(
            time_jitter if time_jitter is not None else config.get("time_jitter"),
            DEFAULT_TIME_JITTER,
        )
        self.finish_distance = float(
            finish_distance if finish_distance is not None else _finish_line_distance()
        )
        self.rng = rng or random.Random()

        if self.reference_distance <= 0:
            raise ValueError(f"Reference distance must be positive, got {self.reference_distance}")
        if self.variable_range < 0:
            raise ValueError(f"Variable range must not be negative, got {self.variable_range}")
        # Non-winners top out at base_distance, which must stay below the winner.
        if self.base_distance >= self.winner_distance:
            raise ValueError(
                f"Base distance {self.base_distance} must be below winner distance {self.winner_distance}"
            )

    def perfect_velocity(self, duration: float) -> float:
        return self.reference_distance / require_positive_duration(duration)

    def perfect_position_at(self, time: float, duration: float, finish_distance: Optional[float] = None) -> float:
        """Position an ideal racer holding constant speed would have reached at ``time``."""
        distance = self.finish_distance if finish_distance is None else finish_distance
        return time * (distance / require_positive_duration(duration))

    def target_distance(self, is_winner: bool) -> float:
        if is_winner:
            return self.winner_distance
        return self.base_distance - self.rng.uniform(0.0, self.variable_range)

    def generate(self, duration: float, target_distance: float) -> Schedule:
        duration = require_positive_duration(duration)
        if not math.isfinite(target_distance) or target_distance < 0:
            raise ValueError(f"Target distance must be a non-negative finite number, got {target_distance}")

        perfect_velocity = self.perfect_velocity(duration)
        segment_count = max(1, math.floor(duration))
        remaining_distance = float(target_distance)
        remaining_time = duration
        last_time = 0.0
        min_remaining = duration * MIN_REMAINING_FRACTION
        entries: List[ScheduleEntry] = []

        for _ in range(segment_count - 1):
            v = perfect_velocity * self.rng.uniform(*self.velocity_jitter)
            t = self.rng.uniform(*self.time_jitter)

            if remaining_distance - v * t < 0:
                v = remaining_distance * t / 2
            if remaining_time - t < 0:
                t = remaining_time / 2

            cumulative_time = duration - (remaining_time - t)
            # Repeated halving can shrink the leftover below the resolution of duration.
            if cumulative_time <= last_time or duration - cumulative_time <= min_remaining:
                break

            remaining_distance -= v * (cumulative_time - last_time)
            remaining_time = duration - cumulative_time
            entries.append(ScheduleEntry(velocity_x=v, cumulative_time=cumulative_time))
            last_time = cumulative_time

        # The last segment closes whatever distance is left over the time that is left.
        span = duration - last_time
        if span > 0:
            final_velocity = remaining_distance / span
        else:
            final_velocity = 0.0
        entries.append(ScheduleEntry(velocity_x=final_velocity, cumulative_time=duration))
        return Schedule(entries)

    def generate_for(self, duration: float, is_winner: bool) -> Tuple[float, Schedule]:
        target = self.target_distance(is_winner)
        return target, self.generate(duration, target)
