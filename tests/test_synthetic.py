import numpy as np
import pytest

from lane_steering.detector import LaneDetector
from lane_steering.geometry import LineSegment
from lane_steering.pipeline import draw_lane, extract_segments, generate_synthetic_road, preprocess


def test_preprocess_finds_edges_only_on_markings():
    img = generate_synthetic_road()
    edges = preprocess(img, (0, 0, 180), (179, 60, 255))
    assert edges.shape == img.shape[:2]
    assert edges.any()
    # plain road surface far from the markings
    assert not edges[:, 195:205].any()


def test_extracted_segments_point_downwards():
    img = generate_synthetic_road()
    segments = extract_segments(preprocess(img, (0, 0, 180), (179, 60, 255)))
    assert segments
    assert all(s.y1 <= s.y2 for s in segments)


def test_blank_frame_has_no_segments():
    edges = np.zeros((320, 400), dtype=np.uint8)
    assert extract_segments(edges) == []


def test_detects_two_lane_lines_on_synthetic():
    detector = LaneDetector()
    res = detector.update(generate_synthetic_road())
    assert res.left_lane is not None
    assert res.right_lane is not None
    assert abs(res.steering_angle) < 5.0


def test_steering_reflects_lane_offset():
    right = LaneDetector().update(generate_synthetic_road(offset_px=40)).steering_angle
    left = LaneDetector().update(generate_synthetic_road(offset_px=-40)).steering_angle
    assert left < 0.0 < right


def test_frame_is_resized_to_working_resolution():
    detector = LaneDetector()
    big = generate_synthetic_road(width=800, height=640)
    dst = np.zeros((detector.height, detector.width, 3), dtype=np.uint8)
    res = detector.update(big, dst)
    assert res.overlay.shape == (detector.height, detector.width, 3)
    assert np.array_equal(dst, res.overlay)


def test_overlay_marks_lanes_in_colour():
    res = LaneDetector().update(generate_synthetic_road())
    overlay = res.overlay
    red = (overlay[:, :, 2] == 255) & (overlay[:, :, 1] == 0) & (overlay[:, :, 0] == 0)
    green = (overlay[:, :, 1] == 255) & (overlay[:, :, 2] == 0) & (overlay[:, :, 0] == 0)
    assert red.any() and green.any()


def test_empty_frame_is_rejected():
    with pytest.raises(ValueError):
        LaneDetector().update(np.zeros((0, 0, 3), dtype=np.uint8))


def test_mismatched_destination_is_rejected():
    detector = LaneDetector()
    with pytest.raises(ValueError):
        detector.update(generate_synthetic_road(offset_px=40), np.zeros((10, 10, 3), dtype=np.uint8))
    assert detector.state.previous_lane is None
    assert detector.left_lane is None and detector.right_lane is None
    assert detector.steering_error() == 0.0


def test_rejected_destination_keeps_previous_frame_state():
    detector = LaneDetector()
    first = detector.update(generate_synthetic_road())
    anchor = detector.state.previous_lane
    with pytest.raises(ValueError):
        detector.update(generate_synthetic_road(offset_px=40), np.zeros((10, 10, 3), dtype=np.uint8))
    assert detector.state.previous_lane == anchor
    assert detector.steering_error() == first.steering_angle


def test_horizontal_lane_is_not_drawn():
    img = np.zeros((320, 400, 3), dtype=np.uint8)
    draw_lane(img, LineSegment(0, 300, 100, 300), 320, (0, 0, 255))
    assert not img.any()
