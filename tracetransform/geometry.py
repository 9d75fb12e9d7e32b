"""Geometry primitives for trace extraction.

This module provides the point and segment types used to describe projection
lines, and helpers for angle conversion and rotation origins.
"""

import math
from typing import NamedTuple

from .constants import _FULL_ANGLE


# ============================================================================
# Coordinate Types
# ============================================================================

class Point(NamedTuple):
    """A floating point image coordinate (x = column, y = row)."""

    x: float
    y: float

    def __add__(self, other):
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor):
        return Point(self.x * factor, self.y * factor)


class Segment(NamedTuple):
    """An ordered pair of points defining one projection line."""

    start: Point
    end: Point

    @property
    def delta(self):
        return self.end - self.start

    def steps(self):
        """Number of unit steps along the major axis from start to end."""
        delta = self.delta
        return int(round(max(abs(delta.x), abs(delta.y))))


# ============================================================================
# Helpers
# ============================================================================

def deg2rad(degrees):
    return degrees * math.pi / 180


def image_origin(rows, cols):
    """Centre of an image grid, used as the rotation origin.

    Parameters
    ----------
    rows : int
        Number of image rows.
    cols : int
        Number of image columns.

    Returns
    -------
    Point
        The point ((cols - 1) / 2, (rows - 1) / 2).
    """
    return Point((cols - 1) / 2.0, (rows - 1) / 2.0)


def vertical_segment(offset, rows):
    """Segment walking down column `offset` of an image with `rows` rows."""
    return Segment(Point(float(offset), 0.0), Point(float(offset), float(rows - 1)))


def angle_range(angle_step):
    """Angles in degrees swept by a sinogram with the given step.

    Parameters
    ----------
    angle_step : float
        Angular resolution in degrees, must be positive.

    Returns
    -------
    list of float
        The angles 0, angle_step, ... strictly below 360.
    """
    count = math.ceil(_FULL_ANGLE / angle_step)
    return [a * angle_step for a in range(count)]
