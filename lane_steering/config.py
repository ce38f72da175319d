"""Detector configuration and YAML/JSON loader."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# HSV bounds used by the colour mask (OpenCV hue range is 0..179)
DEFAULT_MIN_THRESHOLD: Tuple[int, int, int] = (0, 0, 180)
DEFAULT_MAX_THRESHOLD: Tuple[int, int, int] = (179, 60, 255)
DEFAULT_BINARY_THRESHOLD = 180
DEFAULT_SKY_LINE = 140
DEFAULT_LANE_WIDTH = 300
DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 320

REQUIRED_FIELDS = (
    "min_threshold",
    "max_threshold",
    "binary_threshold",
    "sky_line",
    "lane_width",
    "width",
    "height",
)

Triple = Tuple[int, int, int]


def _as_int(name: str, value: Any) -> int:
    # bool is an int subclass but never a valid setting here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _as_triple(name: str, value: Any) -> Triple:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 3:
        raise ConfigurationError(f"{name} must be a list of 3 integers, got {value!r}")
    triple = tuple(_as_int(f"{name}[{i}]", v) for i, v in enumerate(value))
    for v in triple:
        if not 0 <= v <= 255:
            raise ConfigurationError(f"{name} values must be within 0..255, got {value!r}")
    return triple  # type: ignore[return-value]


@dataclass(frozen=True)
class DetectorConfig:
    min_threshold: Triple = DEFAULT_MIN_THRESHOLD
    max_threshold: Triple = DEFAULT_MAX_THRESHOLD
    binary_threshold: int = DEFAULT_BINARY_THRESHOLD
    sky_line: int = DEFAULT_SKY_LINE
    lane_width: int = DEFAULT_LANE_WIDTH
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    # reference pixel of the vehicle; bottom centre of the frame when omitted
    car_position: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "min_threshold", _as_triple("min_threshold", self.min_threshold))
        set_(self, "max_threshold", _as_triple("max_threshold", self.max_threshold))
        for name in ("binary_threshold", "sky_line", "lane_width", "width", "height"):
            set_(self, name, _as_int(name, getattr(self, name)))

        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"width and height must be positive, got {self.width}x{self.height}")
        if not 0 <= self.sky_line < self.height:
            raise ConfigurationError(f"sky_line must be within [0, height), got {self.sky_line}")
        if self.lane_width < 0:
            raise ConfigurationError(f"lane_width must be non-negative, got {self.lane_width}")

        if self.car_position is None:
            set_(self, "car_position", (self.width / 2, float(self.height)))
        else:
            try:
                cx, cy = self.car_position
                position = (float(cx), float(cy))
            except (TypeError, ValueError):
                raise ConfigurationError(f"car_position must be an (x, y) pair of numbers, got {self.car_position!r}") from None
            set_(self, "car_position", position)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DetectorConfig":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"configuration must be a mapping, got {type(data).__name__}")
        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise ConfigurationError(f"missing required configuration field(s): {', '.join(missing)}")
        kwargs: Dict[str, Any] = {name: data[name] for name in REQUIRED_FIELDS}
        if data.get("car_position") is not None:
            kwargs["car_position"] = data["car_position"]
        return cls(**kwargs)


def load_config(path: Union[str, Path]) -> DetectorConfig:
    """
    Read a detector configuration from a YAML file.

    JSON is a subset of YAML, so ``.json`` config files load
    unchanged. Every field in ``REQUIRED_FIELDS`` must be present.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not read config {config_path}: {exc}") from exc

    config = DetectorConfig.from_mapping(data or {})
    logger.info("Loaded detector config from %s (%dx%d)", config_path, config.width, config.height)
    return config
