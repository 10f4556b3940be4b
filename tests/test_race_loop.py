import pytest

from bee_derby.engine import (
    CourseLayout,
    RaceController,
    ScheduleGenerator,
    TelemetryCollector,
    Vector,
    run_headless,
)

FRAME = 1.0 / 60.0


class MidpointRandom:
    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2.0

    def randint(self, a: int, b: int) -> int:
        return a


def _race(duration: float = 5, seed: int = 7, **kwargs) -> RaceController:
    generator = ScheduleGenerator(
        reference_distance=2100.0,
        winner_distance=2100.0,
        base_distance=1900.0,
        variable_range=500.0,
        rng=MidpointRandom(),
    )
    return RaceController(duration, rng=seed, generator=generator, layout=CourseLayout(), **kwargs)


def test_construction_is_idle_with_one_winner():
    race = _race()
    assert race.state == "idle"
    assert race.active is False
    assert 1 <= race.winner_index <= 5
    assert len(race.competitors) == 5
    winners = [body for body in race.competitors if body.competitor.is_winner]
    assert winners == [race.winner]


def test_idle_tick_does_not_move_competitors():
    race = _race()
    starts = [(body.position.x, body.position.y) for body in race.competitors]

    race.tick(0.1)

    assert [(body.position.x, body.position.y) for body in race.competitors] == starts
    assert race.tracking_body.position == Vector(0.0, 0.0)
    assert race.elapsed_seconds == 0.0
    # Animation keeps cycling before the start.
    assert all(body.competitor.key_frame == 2 for body in race.competitors)


def test_start_sets_camera_speed_and_start_grid():
    race = _race()
    race.start()

    assert race.state == "running"
    assert race.elapsed_seconds == 0.0
    assert race.tracking_body.velocity == Vector(1300.0 / 5, 0.0)
    for lane, body in enumerate(race.competitors, start=1):
        assert body.position == Vector(100.0, lane * 12.5 + (lane - 1) * 85.0)
        assert body.position is not body.competitor.start_position


def test_restart_discards_previous_race_state():
    race = _race()
    race.start()
    for _ in range(90):
        race.tick(FRAME)
    first_generation = list(race.competitors)

    race.start()

    assert race.elapsed_seconds == 0.0
    assert race.tick_index == 0
    assert race.tracking_body.position == Vector(0.0, 0.0)
    for old, new in zip(first_generation, race.competitors):
        assert new is not old
        assert len(new.competitor.schedule) == 5
        assert new.position == new.competitor.start_position
    assert sum(body.competitor.is_winner for body in race.competitors) == 1


def test_start_with_new_duration_regenerates_schedules():
    race = _race()
    race.start(10)
    assert race.duration_seconds == 10
    assert race.tracking_body.velocity.x == pytest.approx(130.0)
    assert all(len(body.competitor.schedule) == 10 for body in race.competitors)


def test_competitors_follow_their_schedules():
    race = _race()
    race.start()
    race.tick(FRAME)
    for body in race.competitors:
        assert body.velocity.x == 420.0
        assert body.position.x == pytest.approx(100.0 + 420.0 * FRAME)


def test_finish_freezes_every_velocity():
    race = _race()
    race.start()
    run_headless(race, fps=60)

    assert race.state == "finished"
    assert race.tracking_body.velocity == Vector(0.0, 0.0)
    assert all(body.velocity == Vector(0.0, 0.0) for body in race.competitors)

    frozen = [body.position.x for body in race.competitors]
    camera = race.tracking_body.position.x
    for _ in range(30):
        race.tick(FRAME)
        assert all(body.velocity == Vector(0.0, 0.0) for body in race.competitors)
        assert race.tracking_body.velocity.x == 0.0
    assert [body.position.x for body in race.competitors] == frozen
    assert race.tracking_body.position.x == camera
    assert race.active is True


def test_winner_leads_at_finish():
    race = _race(seed=11)
    standings = run_headless(race, fps=60)

    assert standings[0] is race.winner
    assert race.winner.position.x > 2000.0
    assert all(body.position.x < 1800.0 for body in standings[1:])


def test_rank_labels_count_down_from_competitor_total():
    race = _race()
    assert [race.rank_label(body) for body in race.competitors] == [5, 4, 3, 2, 1]


def test_telemetry_records_each_tick():
    telemetry = TelemetryCollector()
    race = _race(telemetry=telemetry)
    race.start()
    for _ in range(3):
        race.tick(FRAME)

    frames = telemetry.export()
    assert [frame.tick for frame in frames] == [0, 1, 2]
    assert frames[-1].state == "running"
    assert len(frames[-1].competitors) == 5
    assert frames[-1].competitors[0].collider_box is None
    assert frames[-1].competitors[0].screen_position[1] == 402.5

    race.start()
    assert telemetry.export() == ()


def test_competitor_colliders_expose_world_boxes():
    telemetry = TelemetryCollector()
    race = _race(telemetry=telemetry, competitor_colliders=True)
    race.start()
    race.tick(FRAME)

    box = telemetry.frames[-1].competitors[0].collider_box
    assert box[2:] == (85.0, 85.0)
    # Lanes share an x span at the start, so the horizontal corrections cancel.
    assert race.competitors[0].position.x == pytest.approx(100.0 + 420.0 * FRAME)


def test_invalid_inputs_raise():
    with pytest.raises(ValueError):
        _race(duration=0)
    with pytest.raises(ValueError):
        _race(competitor_count=0)

    race = _race()
    with pytest.raises(ValueError):
        race.tick(-FRAME)
    with pytest.raises(ValueError):
        race.start(-5)


def test_telemetry_tracks_schedule_and_ideal_positions():
    telemetry = TelemetryCollector()
    race = _race(telemetry=telemetry)
    race.start()
    for _ in range(3):
        race.tick(FRAME)

    frame = telemetry.latest()
    assert frame.time == pytest.approx(3 * FRAME)
    assert frame.perfect_position == pytest.approx(3 * FRAME * 2200.0 / 5)
    assert all(racer.scheduled_distance == pytest.approx(420.0 * 3 * FRAME) for racer in frame.competitors)

    trace = telemetry.lane_trace(1)
    assert [time for time, _ in trace] == pytest.approx([FRAME, 2 * FRAME, 3 * FRAME])
    assert trace[-1][1] == pytest.approx(100.0 + 420.0 * 3 * FRAME)


def test_telemetry_keeps_only_the_newest_frames():
    telemetry = TelemetryCollector(max_frames=2)
    race = _race(telemetry=telemetry)
    race.start()
    for _ in range(5):
        race.tick(FRAME)

    assert [frame.tick for frame in telemetry.export()] == [3, 4]
    with pytest.raises(ValueError):
        TelemetryCollector(max_frames=0)
