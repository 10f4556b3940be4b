from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass
class TelemetryCompetitorFrame:
    lane: int
    name: str
    position: Tuple[float, float]
    velocity: float
    key_frame: int
    rank_label: int
    is_winner: bool
    screen_position: Tuple[float, float] = (0.0, 0.0)
    scheduled_distance: float = 0.0
    collider_box: Optional[Tuple[float, float, float, float]] = None


@dataclass
class TelemetryFrame:
    tick: int
    time: float
    state: str
    camera_position: Tuple[float, float]
    perfect_position: float = 0.0
    competitors: List[TelemetryCompetitorFrame] = field(default_factory=list)


class TelemetryCollector:
    """Keeps the frames of the current race; a restart empties it."""

    def __init__(self, max_frames: Optional[int] = None) -> None:
        if max_frames is not None and max_frames < 1:
            raise ValueError(f"max_frames must be positive, got {max_frames}")
        self.max_frames = max_frames
        self.frames: List[TelemetryFrame] = []

    def record_frame(self, frame: TelemetryFrame) -> None:
        self.frames.append(frame)
        if self.max_frames is not None and len(self.frames) > self.max_frames:
            del self.frames[0]

    def latest(self) -> Optional[TelemetryFrame]:
        return self.frames[-1] if self.frames else None

    def lane_trace(self, lane: int) -> List[Tuple[float, float]]:
        """(time, x) samples for one lane, oldest first."""
        trace: List[Tuple[float, float]] = []
        for frame in self.frames:
            for racer in frame.competitors:
                if racer.lane == lane:
                    trace.append((frame.time, racer.position[0]))
        return trace

    def export(self) -> Sequence[TelemetryFrame]:
        return tuple(self.frames)

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(frame) for frame in self.frames]

    def clear(self) -> None:
        self.frames.clear()
