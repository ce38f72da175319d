from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from . import pipeline
from .clustering import DISTANCE_CALC_BIN_THRESHOLD, Cluster, cluster_by_angle
from .config import DetectorConfig, load_config
from .errors import ConfigurationError
from .geometry import LineSegment
from .segments import DEFAULT_WEIGHT, filter_and_weight
from .selection import select_lanes
from .steering import estimate_steering

logger = logging.getLogger(__name__)


@dataclass
class TrackerState:
    left_lane: Optional[LineSegment] = None
    right_lane: Optional[LineSegment] = None
    # last detected lane of either side, anchor for the target-point hysteresis
    previous_lane: Optional[LineSegment] = None
    steering_angle: float = 0.0

    def reset(self) -> None:
        self.left_lane = None
        self.right_lane = None
        self.previous_lane = None
        self.steering_angle = 0.0


@dataclass(frozen=True)
class FrameResult:
    left_lane: Optional[LineSegment]
    right_lane: Optional[LineSegment]
    steering_angle: float
    segments: List[LineSegment] = field(default_factory=list)
    clusters: List[Cluster] = field(default_factory=list)
    edges: Optional[np.ndarray] = None
    overlay: Optional[np.ndarray] = None


class LaneDetector:
    """
    Tracks the left and right lane boundaries of one camera stream.

    Each instance owns its tracker state; use one detector per stream. Not
    safe for concurrent calls from several threads.
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        weight: float = DEFAULT_WEIGHT,
        cluster_threshold: float = DISTANCE_CALC_BIN_THRESHOLD,
    ) -> None:
        if weight < 0:
            raise ConfigurationError(f"weight must be non-negative, got {weight}")
        self.config = config if config is not None else DetectorConfig()
        self.weight = weight
        self.cluster_threshold = cluster_threshold
        self._state = TrackerState()
        logger.info(
            "LaneDetector %dx%d sky_line=%d lane_width=%d",
            self.config.width,
            self.config.height,
            self.config.sky_line,
            self.config.lane_width,
        )

    @classmethod
    def from_values(
        cls,
        min_threshold: Sequence[int],
        max_threshold: Sequence[int],
        binary_threshold: int,
        sky_line: int,
        lane_width: int,
        width: int,
        height: int,
        **kwargs,
    ) -> "LaneDetector":
        config = DetectorConfig(
            min_threshold=tuple(min_threshold),
            max_threshold=tuple(max_threshold),
            binary_threshold=binary_threshold,
            sky_line=sky_line,
            lane_width=lane_width,
            width=width,
            height=height,
        )
        return cls(config, **kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> "LaneDetector":
        return cls(load_config(path), **kwargs)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def left_lane(self) -> Optional[LineSegment]:
        return self._state.left_lane

    @property
    def right_lane(self) -> Optional[LineSegment]:
        return self._state.right_lane

    def steering_error(self) -> float:
        """Steering error in degrees for the most recently processed frame."""
        return self._state.steering_angle

    def reset(self) -> None:
        self._state.reset()

    def process_segments(self, segments: Iterable[LineSegment]) -> FrameResult:
        """Run filtering, clustering, lane selection and steering on raw segments."""
        cfg = self.config
        weighted = filter_and_weight(segments, cfg.sky_line, cfg.height, self.weight)
        clusters = cluster_by_angle(weighted, self.cluster_threshold)
        left, right = select_lanes(clusters, cfg.width, cfg.height)

        self._state.left_lane = left
        self._state.right_lane = right
        angle = estimate_steering(self._state, cfg)
        logger.debug(
            "frame: %d weighted segments, %d clusters, left=%s right=%s angle=%.2f",
            len(weighted),
            len(clusters),
            left is not None,
            right is not None,
            angle,
        )
        return FrameResult(
            left_lane=left,
            right_lane=right,
            steering_angle=angle,
            segments=weighted,
            clusters=clusters,
        )

    def update(self, frame: np.ndarray, dst: Optional[np.ndarray] = None) -> FrameResult:
        """
        Process one BGR frame.

        The frame is resized to the working resolution, turned into an edge
        image and segments, and run through :meth:`process_segments`. The
        returned overlay is the resized frame with the left lane in red and
        the right lane in green; it is also copied into ``dst`` when given.
        """
        cfg = self.config
        image = pipeline.resize_to_working(frame, cfg.width, cfg.height)
        # reject a bad destination before the tracker state is touched
        if dst is not None and dst.shape != image.shape:
            raise ValueError(f"dst shape {dst.shape} does not match working frame {image.shape}")
        edges = pipeline.preprocess(image, cfg.min_threshold, cfg.max_threshold)
        segments = pipeline.extract_segments(edges)

        result = self.process_segments(segments)

        pipeline.draw_lane(image, result.left_lane, cfg.height, pipeline.LEFT_LANE_COLOR)
        pipeline.draw_lane(image, result.right_lane, cfg.height, pipeline.RIGHT_LANE_COLOR)
        if dst is not None:
            np.copyto(dst, image)

        return replace(result, edges=edges, overlay=image)
