import json

import pytest

from lane_steering.config import DetectorConfig, load_config
from lane_steering.detector import LaneDetector
from lane_steering.errors import ConfigurationError

RECORD = {
    "min_threshold": [0, 0, 200],
    "max_threshold": [179, 40, 255],
    "binary_threshold": 170,
    "sky_line": 120,
    "lane_width": 250,
    "width": 480,
    "height": 360,
}


def test_load_json_config(tmp_path):
    path = tmp_path / "lane.json"
    path.write_text(json.dumps(RECORD))
    cfg = load_config(path)
    assert cfg.min_threshold == (0, 0, 200)
    assert cfg.max_threshold == (179, 40, 255)
    assert (cfg.width, cfg.height, cfg.sky_line, cfg.lane_width) == (480, 360, 120, 250)
    assert cfg.car_position == (240.0, 360.0)


def test_load_yaml_config(tmp_path):
    path = tmp_path / "lane.yaml"
    lines = [f"{k}: {v}" for k, v in RECORD.items()] + ["car_position: [200, 350]"]
    path.write_text("\n".join(lines))
    cfg = load_config(str(path))
    assert cfg.binary_threshold == 170
    assert cfg.car_position == (200.0, 350.0)


def test_missing_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "nope.json")


def test_unparseable_file_is_a_configuration_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("width: [1, 2\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


@pytest.mark.parametrize("field", sorted(RECORD))
def test_every_field_is_required(tmp_path, field):
    record = {k: v for k, v in RECORD.items() if k != field}
    path = tmp_path / "lane.json"
    path.write_text(json.dumps(record))
    with pytest.raises(ConfigurationError, match=field):
        load_config(path)


def test_empty_file_is_missing_every_field(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_malformed_threshold_is_rejected():
    with pytest.raises(ConfigurationError):
        DetectorConfig.from_mapping({**RECORD, "min_threshold": [0, 0]})
    with pytest.raises(ConfigurationError):
        DetectorConfig.from_mapping({**RECORD, "max_threshold": [0, 0, 300]})


def test_non_integer_values_are_rejected():
    with pytest.raises(ConfigurationError):
        DetectorConfig.from_mapping({**RECORD, "width": "wide"})
    with pytest.raises(ConfigurationError):
        DetectorConfig.from_mapping({**RECORD, "lane_width": 12.5})


def test_sky_line_must_be_inside_the_frame():
    with pytest.raises(ConfigurationError):
        DetectorConfig(sky_line=360, height=360)


def test_dimensions_must_be_positive():
    with pytest.raises(ConfigurationError):
        DetectorConfig(width=0)


def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_detector_from_file_echoes_dimensions(tmp_path):
    path = tmp_path / "lane.json"
    path.write_text(json.dumps(RECORD))
    detector = LaneDetector.from_file(path)
    assert (detector.width, detector.height) == (480, 360)


def test_detector_from_values():
    detector = LaneDetector.from_values([0, 0, 200], [179, 40, 255], 170, 120, 250, 640, 480)
    assert (detector.width, detector.height) == (640, 480)
    assert detector.config.sky_line == 120


def test_undecodable_file_is_a_configuration_error(tmp_path):
    path = tmp_path / "binary.yaml"
    path.write_bytes(b"width: \xff\xfe\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


@pytest.mark.parametrize("position", [["a", "b"], [None, 3], [1, 2, 3], 5])
def test_bad_car_position_is_rejected(position):
    with pytest.raises(ConfigurationError, match="car_position"):
        DetectorConfig.from_mapping({**RECORD, "car_position": position})


def test_bad_car_position_in_file_is_rejected(tmp_path):
    path = tmp_path / "lane.json"
    path.write_text(json.dumps({**RECORD, "car_position": ["left", "bottom"]}))
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_negative_weight_is_rejected():
    with pytest.raises(ConfigurationError, match="weight"):
        LaneDetector(weight=-10)
