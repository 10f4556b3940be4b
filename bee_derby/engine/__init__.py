"""
Race engine package for the bee derby.

The package is split into data models, body physics, schedule generation,
course layout and telemetry. The race loop composes these pieces and is
driven one tick at a time by an external frame source.
"""

from .course import CourseLayout, build_competitor, build_track_bodies  # noqa: F401
from .data_models import (  # noqa: F401
    Box,
    Collider,
    CompetitorExtension,
    RNGContainer,
    Schedule,
    ScheduleEntry,
    Vector,
)
from .physics import Alignment, MovingBody, alignment_between  # noqa: F401
from .schedule import ScheduleGenerator  # noqa: F401
from .telemetry import TelemetryCollector, TelemetryCompetitorFrame, TelemetryFrame  # noqa: F401
from .race_loop import RaceController, run_headless  # noqa: F401

__all__ = [
    "CourseLayout",
    "build_competitor",
    "build_track_bodies",
    "Box",
    "Collider",
    "CompetitorExtension",
    "RNGContainer",
    "Schedule",
    "ScheduleEntry",
    "Vector",
    "Alignment",
    "MovingBody",
    "alignment_between",
    "ScheduleGenerator",
    "TelemetryCollector",
    "TelemetryCompetitorFrame",
    "TelemetryFrame",
    "RaceController",
    "run_headless",
]
