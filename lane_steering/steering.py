"""Steering-error estimation from the tracked lane lines."""

from __future__ import annotations

import logging
import math
from typing import Optional

from .config import DetectorConfig
from .errors import DegenerateGeometryError
from .geometry import LineSegment, Point, x_at_y

logger = logging.getLogger(__name__)

# a jump of the lane centre larger than this is averaged with the previous anchor
HYSTERESIS_PX = 30


def _x_or_none(line: Optional[LineSegment], y: float) -> Optional[float]:
    if line is None:
        return None
    try:
        return x_at_y(line, y)
    except DegenerateGeometryError:
        logger.debug("Treating horizontal lane %s as missing", tuple(line))
        return None


def target_point(
    left: Optional[LineSegment],
    right: Optional[LineSegment],
    previous: Optional[LineSegment],
    config: DetectorConfig,
) -> Point:
    """
    Point the vehicle should head for, on the row half way down the frame.

    Both lanes: midpoint of the two, damped towards the previous anchor when
    it moved by ``HYSTERESIS_PX`` or more. One lane: offset by half a lane
    width towards the inside. No lane: the car position itself.
    """
    y = config.height / 2
    p1 = _x_or_none(left, y)
    p2 = _x_or_none(right, y)

    if p1 is not None and p2 is not None:
        pr = _x_or_none(previous, y)
        if pr is None:
            pr = config.width / 2
        mid = (p1 + p2) / 2
        if abs(mid - pr) < HYSTERESIS_PX:
            return mid, y
        return (mid + pr) / 2, y
    if p2 is not None:
        return p2 - config.lane_width / 2, y
    if p1 is not None:
        return p1 + config.lane_width / 2, y
    return config.car_position


def error_angle(p: Point, car: Point) -> float:
    """Signed bearing in degrees from ``car`` to ``p``; negative is left."""
    px, py = p
    cx, cy = car
    if px == cx:
        return 0.0
    if py == cy:
        return -90.0 if px < cx else 90.0

    dx = px - cx
    dy = cy - py
    angle = math.degrees(math.atan(abs(dx) / dy))
    return -angle if dx < 0 else angle


def estimate_steering(state, config: DetectorConfig) -> float:
    """
    Compute the steering error for ``state`` and advance its hysteresis anchor.

    ``state`` is a :class:`~lane_steering.detector.TrackerState`; its
    ``previous_lane`` becomes the left lane, else the right lane, when one
    was detected this frame.
    """
    p = target_point(state.left_lane, state.right_lane, state.previous_lane, config)
    angle = error_angle(p, config.car_position)

    if state.left_lane is not None:
        state.previous_lane = state.left_lane
    elif state.right_lane is not None:
        state.previous_lane = state.right_lane

    state.steering_angle = angle
    return angle
