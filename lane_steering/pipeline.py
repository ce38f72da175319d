"""OpenCV stages around the lane core: edges in, segments out, overlays back."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .errors import DegenerateGeometryError
from .geometry import LineSegment, point_at_y

Color = Tuple[int, int, int]

BLUR_KERNEL_SIZE = 5
DILATE_KERNEL_SIZE = (5, 5)
CANNY_LOW = 50
CANNY_HIGH = 150

HOUGH_RHO = 1.0
HOUGH_THETA = np.pi / 180.0
HOUGH_THRESHOLD = 35
HOUGH_MIN_LINE_LENGTH = 10
HOUGH_MAX_LINE_GAP = 3

LEFT_LANE_COLOR: Color = (0, 0, 255)
RIGHT_LANE_COLOR: Color = (0, 255, 0)


def resize_to_working(frame: np.ndarray, width: int, height: int) -> np.ndarray:
    if frame is None or frame.size == 0:
        raise ValueError("Empty image provided")
    if frame.shape[1] == width and frame.shape[0] == height:
        return frame.copy()
    return cv2.resize(frame, (int(width), int(height)))


def hsv_color_mask(bgr: np.ndarray, lower: Sequence[int], upper: Sequence[int]) -> np.ndarray:
    """Binary mask of pixels whose HSV value lies within ``lower``..``upper``."""
    hsv = cv2.cvtColor(bgr, cv2.COLOR_BGR2HSV)
    return cv2.inRange(hsv, np.array(lower, dtype=np.uint8), np.array(upper, dtype=np.uint8))


def preprocess(bgr: np.ndarray, lower: Sequence[int], upper: Sequence[int]) -> np.ndarray:
    """
    Edge image restricted to lane-coloured areas.

    The colour mask is computed on a median-blurred copy and dilated so that
    edges on the border of a marking survive; Canny runs on the plain gray
    image.
    """
    blurred = cv2.medianBlur(bgr, BLUR_KERNEL_SIZE)
    gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)

    mask = hsv_color_mask(blurred, lower, upper)
    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, DILATE_KERNEL_SIZE)
    mask = cv2.dilate(mask, kernel)

    edges = cv2.Canny(gray, CANNY_LOW, CANNY_HIGH)
    return cv2.bitwise_and(edges, edges, mask=mask)


def extract_segments(
    edges: np.ndarray,
    rho: float = HOUGH_RHO,
    theta: float = HOUGH_THETA,
    threshold: int = HOUGH_THRESHOLD,
    min_line_length: int = HOUGH_MIN_LINE_LENGTH,
    max_line_gap: int = HOUGH_MAX_LINE_GAP,
) -> List[LineSegment]:
    lines = cv2.HoughLinesP(
        edges,
        rho,
        theta,
        int(threshold),
        minLineLength=int(min_line_length),
        maxLineGap=int(max_line_gap),
    )
    if lines is None:
        return []
    segments: List[LineSegment] = []
    for x1, y1, x2, y2 in lines.reshape((-1, 4)).tolist():
        # Hough endpoints come in either order; orient every segment top to
        # bottom so the same marking always yields the same angle sign
        if y1 > y2:
            x1, y1, x2, y2 = x2, y2, x1, y1
        segments.append(LineSegment(x1, y1, x2, y2))
    return segments


def draw_lane(
    image: np.ndarray,
    lane: Optional[LineSegment],
    height: int,
    color: Color,
    thickness: int = 2,
) -> np.ndarray:
    """Draw ``lane`` in place from the bottom row up to mid-frame."""
    if lane is None:
        return image
    try:
        x1, y1 = point_at_y(lane, height)
        x2, y2 = point_at_y(lane, height / 2)
    except DegenerateGeometryError:
        return image
    cv2.line(image, (int(round(x1)), int(y1)), (int(round(x2)), int(y2)), color, int(thickness))
    return image


def generate_synthetic_road(
    width: int = 400,
    height: int = 320,
    offset_px: int = 0,
    lane_top_width: int = 80,
    lane_bottom_width: int = 300,
    horizon: float = 0.45,
    thickness: int = 6,
) -> np.ndarray:
    """
    Dark road with two straight white markings converging towards the horizon.

    ``offset_px`` shifts the whole lane sideways, positive to the right, so a
    detector run on the image should report a steering error of the same sign.
    """
    img = np.full((height, width, 3), 40, dtype=np.uint8)
    cx = width // 2 + int(offset_px)
    top_y = int(height * horizon)
    bottom_y = height - 1

    left = ((cx - lane_bottom_width // 2, bottom_y), (cx - lane_top_width // 2, top_y))
    right = ((cx + lane_bottom_width // 2, bottom_y), (cx + lane_top_width // 2, top_y))
    for p, q in (left, right):
        cv2.line(img, p, q, (255, 255, 255), int(thickness))
    return img
