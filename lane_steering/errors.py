"""Exceptions raised by lane_steering."""


class LaneSteeringError(Exception):
    """Base class for all package errors."""


class ConfigurationError(LaneSteeringError, ValueError):
    """A detector configuration is missing, malformed or out of range."""


class DegenerateGeometryError(LaneSteeringError, ZeroDivisionError):
    """A horizontal line has no single x-intercept for a given y."""
