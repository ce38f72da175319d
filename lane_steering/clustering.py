"""Single-link clustering of segments by orientation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, TypeVar

from . import geometry
from .geometry import LineSegment

logger = logging.getLogger(__name__)

T = TypeVar("T")

DISTANCE_CALC_BIN_THRESHOLD = 10.0  # degrees


class DisjointSet:
    """Union-find with path halving and union by size."""

    def __init__(self, n: int) -> None:
        self.parent = list(range(n))
        self.size = [1] * n

    def find(self, i: int) -> int:
        parent = self.parent
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    def union(self, a: int, b: int) -> bool:
        ra = self.find(a)
        rb = self.find(b)
        if ra == rb:
            return False
        if self.size[ra] < self.size[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        self.size[ra] += self.size[rb]
        return True

    def labels(self) -> List[int]:
        """One label per element, numbered by first appearance of its set."""
        seen: Dict[int, int] = {}
        out: List[int] = []
        for i in range(len(self.parent)):
            root = self.find(i)
            if root not in seen:
                seen[root] = len(seen)
            out.append(seen[root])
        return out


def partition(items: Sequence[T], predicate: Callable[[T, T], bool]) -> List[int]:
    """
    Label ``items`` so that any two items for which ``predicate`` holds share
    a label, transitively. Checks every pair.
    """
    n = len(items)
    ds = DisjointSet(n)
    for i in range(n):
        for j in range(i + 1, n):
            if predicate(items[i], items[j]):
                ds.union(i, j)
    return ds.labels()


def angle_compatible(a: LineSegment, b: LineSegment, threshold: float = DISTANCE_CALC_BIN_THRESHOLD) -> bool:
    return abs(a.angle - b.angle) < threshold


@dataclass
class Cluster:
    discovery_index: int
    members: List[LineSegment] = field(default_factory=list)

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def mean_segment(self) -> LineSegment:
        return geometry.mean_segment(self.members)


def _angle_labels(segments: Sequence[LineSegment], threshold: float) -> List[int]:
    # With a scalar |a - b| < t predicate, the connected components are the
    # runs of the sorted angles whose consecutive gaps stay below t, so only
    # neighbours in sorted order need a union.
    angles = [seg.angle for seg in segments]
    order = sorted(range(len(angles)), key=angles.__getitem__)
    ds = DisjointSet(len(angles))
    for prev, cur in zip(order, order[1:]):
        if angles[cur] - angles[prev] < threshold:
            ds.union(prev, cur)
    return ds.labels()


def group_by_labels(segments: Sequence[LineSegment], labels: Sequence[int]) -> List[Cluster]:
    clusters: List[Cluster] = []
    for seg, label in zip(segments, labels):
        if label == len(clusters):
            clusters.append(Cluster(discovery_index=label))
        clusters[label].members.append(seg)
    return clusters


def cluster_by_angle(
    segments: Sequence[LineSegment],
    threshold: float = DISTANCE_CALC_BIN_THRESHOLD,
) -> List[Cluster]:
    """Partition ``segments`` into clusters of similar angle, in discovery order."""
    if not segments:
        return []
    clusters = group_by_labels(segments, _angle_labels(segments, threshold))
    logger.debug(
        "cluster_by_angle: %d segments -> %d clusters %s",
        len(segments),
        len(clusters),
        [c.member_count for c in clusters],
    )
    return clusters
