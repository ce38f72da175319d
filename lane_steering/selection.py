from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .clustering import Cluster
from .errors import DegenerateGeometryError
from .geometry import LineSegment, x_at_y
from .segments import MIN_LANE_ANGLE_DEG

logger = logging.getLogger(__name__)

LanePair = Tuple[Optional[LineSegment], Optional[LineSegment]]


class ClusterRank(NamedTuple):
    cluster_id: int
    member_count: int


def rank_clusters(clusters: Sequence[Cluster]) -> List[ClusterRank]:
    """Largest first; ties keep discovery order (``sorted`` is stable)."""
    records = [ClusterRank(i, c.member_count) for i, c in enumerate(clusters)]
    return sorted(records, key=lambda r: r.member_count, reverse=True)


def _bottom_x(line: LineSegment, height: int) -> Optional[float]:
    try:
        return x_at_y(line, height)
    except DegenerateGeometryError:
        logger.debug("Ignoring horizontal lane candidate %s", tuple(line))
        return None


def _is_steep(line: LineSegment) -> bool:
    return abs(line.angle) > MIN_LANE_ANGLE_DEG


def _classify_single(line: LineSegment, width: int, height: int) -> LanePair:
    if not _is_steep(line):
        return None, None
    x = _bottom_x(line, height)
    if x is None:
        return None, None
    if x < width / 2:
        return line, None
    return None, line


def select_lanes(clusters: Sequence[Cluster], width: int, height: int) -> LanePair:
    """
    Pick the left and right lane boundaries from this frame's clusters.

    One cluster is assigned by which half of the image its bottom-row
    intercept falls in. With more clusters only the two largest are
    considered; if either is too shallow the frame is treated as ambiguous
    and no lane is reported.
    """
    if not clusters:
        return None, None

    if len(clusters) == 1:
        return _classify_single(clusters[0].mean_segment, width, height)

    first, second = rank_clusters(clusters)[:2]
    a = clusters[first.cluster_id].mean_segment
    b = clusters[second.cluster_id].mean_segment

    if not (_is_steep(a) and _is_steep(b)):
        logger.debug("Top clusters too shallow (%.1f, %.1f deg), dropping frame", a.angle, b.angle)
        return None, None

    ax = _bottom_x(a, height)
    bx = _bottom_x(b, height)
    if ax is None and bx is None:
        return None, None
    if ax is None:
        return _classify_single(b, width, height)
    if bx is None:
        return _classify_single(a, width, height)

    if ax < bx:
        return a, b
    return b, a
