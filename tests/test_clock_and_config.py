import json
from unittest.mock import patch

import pytest

from bee_derby import config
from bee_derby.clock import duration_from_clock, parse_clock
from bee_derby.engine import CourseLayout


def test_duration_from_clock_fields():
    assert duration_from_clock(0, 0, 5) == 5
    assert duration_from_clock("01", "02", "03") == 3723
    assert duration_from_clock("", "1", None) == 60


@pytest.mark.parametrize(
    "fields",
    [(0, 0, 0), ("", "", ""), ("x", 0, 1), (0, -1, 30), (True, 0, 0)],
)
def test_duration_from_clock_rejects_bad_input(fields):
    with pytest.raises(ValueError):
        duration_from_clock(*fields)


def test_parse_clock_formats():
    assert parse_clock("00:00:30") == 30
    assert parse_clock("2:05") == 125
    with pytest.raises(ValueError):
        parse_clock("five seconds")


def test_load_config_reads_json(tmp_path):
    path = tmp_path / "balance.json"
    path.write_text(json.dumps({"race": {"camera_distance": 900.0}}))

    loaded = config.load_config(str(path))

    assert config.get_config("race.camera_distance", config=loaded) == 900.0


def test_load_config_missing_file_returns_none(tmp_path):
    assert config.load_config(str(tmp_path / "missing.json")) is None


def test_get_config_falls_back_to_default():
    assert config.get_config("race.not_a_key", default=3, config={"race": {}}) == 3
    with patch.object(config, "BALANCE_CONFIG", None):
        assert config.get_config("race.camera_distance", default=1300.0) == 1300.0


def test_env_flag(monkeypatch):
    monkeypatch.setenv("BEE_DERBY_TEST_FLAG", "yes")
    assert config.env_flag("BEE_DERBY_TEST_FLAG") is True
    monkeypatch.delenv("BEE_DERBY_TEST_FLAG")
    assert config.env_flag("BEE_DERBY_TEST_FLAG", default=False) is False


def test_course_layout_overrides_and_validation():
    layout = CourseLayout.from_config({"start_line_x": 0.0, "finish_line_x": 1000.0})
    assert layout.race_distance == 1000.0

    with pytest.raises(ValueError):
        CourseLayout.from_config({"start_line_x": 500.0, "finish_line_x": 400.0})
