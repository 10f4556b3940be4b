from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from bee_derby.config import BALANCE_CONFIG

from .course import CourseLayout, build_competitor, build_track_bodies
from .data_models import RNGContainer, Vector, require_positive_duration
from .physics import MovingBody
from .schedule import ScheduleGenerator
from .telemetry import TelemetryCollector, TelemetryCompetitorFrame, TelemetryFrame

DEFAULT_COMPETITOR_COUNT = 5
DEFAULT_CAMERA_DISTANCE = 1300.0
DEFAULT_ANIMATION_SPEED = 0.09
DEFAULT_FRAME_COUNT = 4

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_FINISHED = "finished"


def _race_config() -> Dict[str, object]:
    if not isinstance(BALANCE_CONFIG, dict):
        return {}
    merged: Dict[str, object] = {}
    for section in ("race", "animation"):
        config = BALANCE_CONFIG.get(section)
        if isinstance(config, dict):
            merged.update(config)
    return merged


class RaceController:
    """Owns every body of one race and advances them once per external frame."""

    def __init__(
        self,
        duration: float,
        rng: Union[RNGContainer, int, None] = None,
        telemetry: Optional[TelemetryCollector] = None,
        verbose: bool = False,
        competitor_count: Optional[int] = None,
        layout: Optional[CourseLayout] = None,
        generator: Optional[ScheduleGenerator] = None,
        competitor_colliders: Optional[bool] = None,
    ) -> None:
        config = _race_config()
        self.duration_seconds = require_positive_duration(duration)
        self.rng = rng if isinstance(rng, RNGContainer) else RNGContainer.from_seed(rng)
        self.telemetry = telemetry
        self.verbose = verbose
        self.layout = layout or CourseLayout.from_config()
        self.schedules = generator or ScheduleGenerator(
            rng=self.rng.schedule_rng, finish_distance=self.layout.finish_line_x
        )

        count = competitor_count if competitor_count is not None else config.get("competitor_count", DEFAULT_COMPETITOR_COUNT)
        self.competitor_count = int(count)
        if self.competitor_count < 1:
            raise ValueError(f"A race needs at least one competitor, got {count}")

        self.camera_distance = float(config.get("camera_distance", DEFAULT_CAMERA_DISTANCE))
        self.animation_speed = float(config.get("animation_speed", DEFAULT_ANIMATION_SPEED))
        self.frame_count = int(config.get("frame_count", DEFAULT_FRAME_COUNT))
        if competitor_colliders is None:
            competitor_colliders = bool(config.get("competitor_colliders", False))
        self.competitor_colliders = competitor_colliders

        self.tracking_body = MovingBody(position=Vector(0.0, 0.0), name="camera")
        self.track_bodies: List[MovingBody] = build_track_bodies(self.layout)
        self.elapsed_seconds = 0.0
        self.active = False
        self.tick_index = 0

        self.winner_index = self._draw_winner_index()
        self.competitors: List[MovingBody] = self._build_competitors(self.winner_index)

    # ------------------------------------------------------------------ #
    # State

    @property
    def finished(self) -> bool:
        return self.active and self.elapsed_seconds >= self.duration_seconds

    @property
    def state(self) -> str:
        if not self.active:
            return STATE_IDLE
        if self.finished:
            return STATE_FINISHED
        return STATE_RUNNING

    @property
    def winner(self) -> MovingBody:
        return self.competitors[self.winner_index - 1]

    def bodies(self) -> List[MovingBody]:
        return [*self.track_bodies, *self.competitors, self.tracking_body]

    def rank_label(self, competitor: MovingBody) -> int:
        return len(self.competitors) - self.competitors.index(competitor)

    def standings(self) -> List[MovingBody]:
        """Competitors ordered by track position, leader first."""
        return sorted(self.competitors, key=lambda body: body.position.x, reverse=True)

    # ------------------------------------------------------------------ #
    # Transitions

    def start(self, duration: Optional[float] = None) -> None:
        """Starts (or restarts) the race; nothing from a previous run survives."""
        if duration is not None:
            self.duration_seconds = require_positive_duration(duration)

        self.tracking_body.position = Vector(0.0, 0.0)
        self.winner_index = self._draw_winner_index()
        self.competitors = self._build_competitors(self.winner_index)
        self.active = True
        self.elapsed_seconds = 0.0
        self.tick_index = 0
        self.tracking_body.velocity = Vector(self.camera_distance / self.duration_seconds, 0.0)
        if self.telemetry is not None:
            self.telemetry.clear()

        if self.verbose:
            print(f"--- Race started: {self.duration_seconds:g}s, winner is lane {self.winner_index} ---")
            for body in self.competitors:
                extension = body.competitor
                print(f"  -> {body.name}: target {extension.target_distance:.1f} over {len(extension.schedule)} segments")

    def tick(self, dt: float) -> None:
        if dt < 0:
            raise ValueError(f"Tick delta must not be negative, got {dt}")

        if self.active:
            was_finished = self.finished
            self.elapsed_seconds += dt
            if self.finished:
                self._freeze()
                if self.verbose and not was_finished:
                    order = ", ".join(body.name for body in self.standings())
                    print(f"--- Race finished at {self.elapsed_seconds:.2f}s: {order} ---")

        for body in self.competitors:
            self._update_competitor(body, dt)

        bodies = self.bodies()
        for body in bodies:
            body.resolve_collisions(bodies)
        for body in bodies:
            body.integrate(dt)

        if self.telemetry is not None:
            self.telemetry.record_frame(self._snapshot())
        self.tick_index += 1

    # ------------------------------------------------------------------ #
    # Internals

    def _draw_winner_index(self) -> int:
        return self.rng.main_rng.randint(1, self.competitor_count)

    def _build_competitors(self, winner_index: int) -> List[MovingBody]:
        competitors: List[MovingBody] = []
        for lane in range(1, self.competitor_count + 1):
            body = build_competitor(
                self.layout,
                lane,
                is_winner=lane == winner_index,
                with_collider=self.competitor_colliders,
                animation_speed=self.animation_speed,
            )
            extension = body.competitor
            extension.target_distance, extension.schedule = self.schedules.generate_for(
                self.duration_seconds, extension.is_winner
            )
            competitors.append(body)
        return competitors

    def _freeze(self) -> None:
        self.tracking_body.velocity = Vector(0.0, 0.0)
        for body in self.competitors:
            body.velocity = Vector(0.0, 0.0)

    def _update_competitor(self, body: MovingBody, dt: float) -> None:
        extension = body.competitor
        # Schedules only drive a race in progress; a finished race stays frozen.
        if self.active and not self.finished:
            velocity = extension.schedule.velocity_at(self.elapsed_seconds)
            if velocity is not None:
                body.velocity.x = velocity
        extension.advance_animation(dt, self.frame_count)

    def _snapshot(self) -> TelemetryFrame:
        frames: List[TelemetryCompetitorFrame] = []
        for body in self.competitors:
            box = body.world_box()
            frames.append(
                TelemetryCompetitorFrame(
                    lane=body.competitor.lane,
                    name=body.name,
                    position=(body.position.x, body.position.y),
                    velocity=body.velocity.x,
                    key_frame=body.competitor.key_frame,
                    rank_label=self.rank_label(body),
                    is_winner=body.competitor.is_winner,
                    screen_position=body.screen_position(self.layout.surface_height, body.competitor.size.y),
                    scheduled_distance=body.competitor.schedule.distance_at(self.elapsed_seconds),
                    collider_box=(box.x, box.y, box.width, box.height) if box else None,
                )
            )
        return TelemetryFrame(
            tick=self.tick_index,
            time=self.elapsed_seconds,
            state=self.state,
            camera_position=(self.tracking_body.position.x, self.tracking_body.position.y),
            perfect_position=self.schedules.perfect_position_at(self.elapsed_seconds, self.duration_seconds),
            competitors=frames,
        )


def run_headless(controller: RaceController, fps: int = 60, extra_seconds: float = 0.0) -> Sequence[MovingBody]:
    """Drives a started race at a fixed frame rate until it finishes; returns the standings."""
    if fps <= 0:
        raise ValueError(f"Frame rate must be positive, got {fps}")
    if not controller.active:
        controller.start()
    frame_interval = 1.0 / fps
    while not controller.finished:
        controller.tick(frame_interval)
    for _ in range(int(extra_seconds * fps)):
        controller.tick(frame_interval)
    return controller.standings()
