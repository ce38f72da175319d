from __future__ import annotations

import logging
import math
from typing import Iterable, List

from .geometry import LineSegment

logger = logging.getLogger(__name__)

MIN_LANE_ANGLE_DEG = 15.0
NEAR_VEHICLE_BONUS = 10
DEFAULT_WEIGHT = 10.0


def is_lane_candidate(seg: LineSegment, sky_line: int) -> bool:
    if abs(seg.angle) < MIN_LANE_ANGLE_DEG:
        return False
    # both endpoints must be on the road side of the sky line
    return seg.y1 >= sky_line and seg.y2 >= sky_line


def replication_count(seg: LineSegment, height: int, weight: float) -> int:
    """How many copies of ``seg`` take part in the clustering vote."""
    if not weight:
        return 1
    bottom_third = (height // 3) * 2
    bonus = NEAR_VEHICLE_BONUS if (seg.y1 > bottom_third or seg.y2 > bottom_third) else 0
    return int(math.ceil(seg.length / weight)) + bonus


def filter_and_weight(
    segments: Iterable[LineSegment],
    sky_line: int,
    height: int,
    weight: float = DEFAULT_WEIGHT,
) -> List[LineSegment]:
    """
    Drop segments that cannot be lane boundaries and replicate the rest.

    Long segments and segments close to the vehicle (bottom third of the
    frame) get more copies so they dominate the angle clustering.
    """
    if weight < 0:
        raise ValueError(f"weight must be non-negative, got {weight}")
    out: List[LineSegment] = []
    kept = 0
    for seg in segments:
        seg = LineSegment(*seg)
        if not is_lane_candidate(seg, sky_line):
            continue
        kept += 1
        out.extend([seg] * replication_count(seg, height, weight))
    logger.debug("filter_and_weight: kept %d segments, %d weighted copies", kept, len(out))
    return out
