from __future__ import annotations

import bisect
import math
import random
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

import numpy as np


@dataclass
class Vector:
    """2D pair used for positions, velocities and sizes."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y)

    def product(self, other: "Vector") -> "Vector":
        """Component-wise product."""
        return Vector(self.x * other.x, self.y * other.y)

    def scale_in_place(self, value: float) -> None:
        self.x *= value
        self.y *= value

    def area(self) -> float:
        return self.x * self.y

    def copy(self) -> "Vector":
        return Vector(self.x, self.y)


@dataclass(frozen=True)
class Box:
    """World-space axis-aligned rectangle extending +width/+height from (x, y)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height


@dataclass
class Collider:
    relative_offset: Vector
    size: Vector

    def __post_init__(self) -> None:
        if not (self.size.x > 0 and self.size.y > 0):
            raise ValueError(f"Collider size must be positive on both axes, got ({self.size.x}, {self.size.y})")

    def world_box(self, position: Vector) -> Box:
        return Box(
            x=position.x + self.relative_offset.x,
            y=position.y + self.relative_offset.y,
            width=self.size.x,
            height=self.size.y,
        )


@dataclass(frozen=True)
class ScheduleEntry:
    velocity_x: float
    cumulative_time: float


@dataclass(frozen=True)
class Schedule:
    """Piecewise-constant velocity plan; entries are ordered by cumulative time."""

    entries: Sequence[ScheduleEntry] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ScheduleEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> ScheduleEntry:
        return self.entries[index]

    @property
    def duration(self) -> float:
        if not self.entries:
            return 0.0
        return self.entries[-1].cumulative_time

    def cumulative_times(self) -> np.ndarray:
        return np.array([entry.cumulative_time for entry in self.entries], dtype=float)

    def velocities(self) -> np.ndarray:
        return np.array([entry.velocity_x for entry in self.entries], dtype=float)

    def segment_durations(self) -> np.ndarray:
        return np.diff(self.cumulative_times(), prepend=0.0)

    def total_distance(self) -> float:
        if not self.entries:
            return 0.0
        return float(np.dot(self.velocities(), self.segment_durations()))

    def velocity_at(self, time: float) -> Optional[float]:
        """
        Returns the scheduled velocity at the given race time.

        Every bracket is checked in order without breaking, so a time sitting
        exactly on a boundary takes the later segment's velocity. Times outside
        the schedule return None.
        """
        velocity: Optional[float] = None
        lower = 0.0
        for entry in self.entries:
            upper = entry.cumulative_time
            if lower <= time <= upper:
                velocity = entry.velocity_x
            lower = upper
        return velocity

    def distance_at(self, time: float) -> float:
        """Distance covered by following the schedule from 0 up to ``time``."""
        if not self.entries or time <= 0:
            return 0.0
        times = self.cumulative_times()
        durations = self.segment_durations()
        velocities = self.velocities()
        idx = bisect.bisect_left(times.tolist(), min(time, float(times[-1])))
        covered = float(np.dot(velocities[:idx], durations[:idx]))
        if idx < len(times):
            start = float(times[idx - 1]) if idx > 0 else 0.0
            covered += velocities[idx] * (min(time, float(times[idx])) - start)
        return float(covered)


@dataclass
class CompetitorExtension:
    """Racing data attached to a body that takes part in the race."""

    is_winner: bool
    start_position: Vector
    lane: int
    size: Vector
    target_distance: float = 0.0
    schedule: Schedule = field(default_factory=Schedule)
    key_frame: int = 1
    time_since_flap: float = 0.0
    animation_speed: float = 0.09

    def advance_animation(self, dt: float, frame_count: int = 4) -> None:
        self.time_since_flap += dt
        if self.time_since_flap >= self.animation_speed:
            self.key_frame = self.key_frame % frame_count + 1
            self.time_since_flap = 0.0


@dataclass
class RNGContainer:
    """Seeded RNGs for the winner draw and the schedule draws."""

    main_seed: Optional[int] = None
    schedule_seed: Optional[int] = None

    main_rng: Optional[random.Random] = field(init=False, default=None)
    schedule_rng: Optional[random.Random] = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.main_rng = random.Random(self.main_seed)
        self.schedule_rng = random.Random(self.schedule_seed)

    @classmethod
    def from_seed(cls, seed: Optional[int]) -> "RNGContainer":
        if seed is None:
            return cls()
        return cls(main_seed=seed * 11 + 1, schedule_seed=seed * 11 + 2)


def require_positive_duration(duration: float, label: str = "duration") -> float:
    try:
        value = float(duration)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be a number, got {duration!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{label} must be a positive finite number of seconds, got {duration!r}")
    return value
