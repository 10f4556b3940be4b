from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from bee_derby.config import BALANCE_CONFIG

from .data_models import Collider, CompetitorExtension, Vector
from .physics import MovingBody


def _course_config() -> Dict[str, float]:
    if not isinstance(BALANCE_CONFIG, dict):
        return {}
    config = BALANCE_CONFIG.get("course")
    if not isinstance(config, dict):
        return {}
    return config


@dataclass(frozen=True)
class CourseLayout:
    surface_height: float = 500.0
    start_line_x: float = 100.0
    finish_line_x: float = 2200.0
    competitor_size: float = 85.0
    lane_gap: float = 12.5

    @classmethod
    def from_config(cls, overrides: Optional[Dict[str, float]] = None) -> "CourseLayout":
        values = dict(_course_config())
        if overrides:
            values.update(overrides)
        known = {name: float(values[name]) for name in cls.__dataclass_fields__ if name in values}
        layout = cls(**known)
        if layout.finish_line_x <= layout.start_line_x:
            raise ValueError(
                f"Finish line ({layout.finish_line_x}) must lie beyond the start line ({layout.start_line_x})"
            )
        if layout.competitor_size <= 0:
            raise ValueError(f"Competitor size must be positive, got {layout.competitor_size}")
        return layout

    @property
    def race_distance(self) -> float:
        return self.finish_line_x - self.start_line_x

    def start_position(self, lane: int) -> Vector:
        """Lanes are 1-based and stack upwards from the bottom of the surface."""
        y = lane * self.lane_gap + (lane - 1) * self.competitor_size
        return Vector(self.start_line_x, y)


def build_track_bodies(layout: CourseLayout) -> List[MovingBody]:
    """Background plus start and finish lines; none of them move or collide."""
    return [
        MovingBody(position=Vector(0.0, 0.0), fixed=True, name="background"),
        MovingBody(position=Vector(layout.start_line_x, 0.0), fixed=True, name="start_line"),
        MovingBody(position=Vector(layout.finish_line_x, 0.0), fixed=True, name="finish_line"),
    ]


def build_competitor(
    layout: CourseLayout,
    lane: int,
    is_winner: bool,
    with_collider: bool = False,
    animation_speed: float = 0.09,
) -> MovingBody:
    size = Vector(layout.competitor_size, layout.competitor_size)
    start = layout.start_position(lane)
    collider = Collider(relative_offset=Vector(0.0, 0.0), size=size.copy()) if with_collider else None
    extension = CompetitorExtension(
        is_winner=is_winner,
        start_position=start,
        lane=lane,
        size=size,
        animation_speed=animation_speed,
    )
    return MovingBody(
        position=start.copy(),
        collider=collider,
        name=f"Bee {lane}",
        competitor=extension,
    )
