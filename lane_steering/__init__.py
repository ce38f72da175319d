"""Lane tracking and steering-error estimation (segments → lanes → angle)."""

from .clustering import Cluster, DisjointSet, cluster_by_angle, partition
from .config import DetectorConfig, load_config
from .detector import FrameResult, LaneDetector, TrackerState
from .errors import ConfigurationError, DegenerateGeometryError, LaneSteeringError
from .geometry import LineSegment, x_at_y
from .segments import filter_and_weight
from .selection import select_lanes
from .steering import error_angle, estimate_steering, target_point

__all__ = [
    "Cluster",
    "ConfigurationError",
    "DegenerateGeometryError",
    "DetectorConfig",
    "DisjointSet",
    "FrameResult",
    "LaneDetector",
    "LaneSteeringError",
    "LineSegment",
    "TrackerState",
    "cluster_by_angle",
    "error_angle",
    "estimate_steering",
    "filter_and_weight",
    "load_config",
    "partition",
    "select_lanes",
    "target_point",
    "x_at_y",
]
