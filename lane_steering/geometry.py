from __future__ import annotations

import math
from typing import NamedTuple, Tuple

import numpy as np

from .errors import DegenerateGeometryError

Point = Tuple[float, float]


class LineSegment(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @property
    def angle(self) -> float:
        """
        Orientation in degrees.

        A segment drawn straight down the image (y increasing) is 0, the sign
        follows the horizontal direction of travel, so the value flips sign
        across vertical.
        """
        return math.degrees(math.atan2(self.x2 - self.x1, self.y2 - self.y1))


def x_at_y(line: LineSegment, y: float) -> float:
    """x-coordinate where the infinite extension of ``line`` crosses row ``y``."""
    x1, y1, x2, y2 = line
    if y1 == y2:
        raise DegenerateGeometryError(f"horizontal line {tuple(line)} has no x at y={y}")
    return (y - y1) * (x1 - x2) / (y1 - y2) + x1


def point_at_y(line: LineSegment, y: float) -> Point:
    return x_at_y(line, y), y


def mean_segment(segments) -> LineSegment:
    """Component-wise arithmetic mean of the endpoints (not a line fit)."""
    if len(segments) == 0:
        raise ValueError("mean of an empty segment list")
    coords = np.asarray(segments, dtype=float).reshape((-1, 4))
    return LineSegment(*(float(v) for v in coords.mean(axis=0)))
