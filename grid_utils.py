"""
Geometry and projection utilities for metric grid rendering.

This module provides the grid-space bounds type, the projection adapter
between WGS84 and a grid's planar easting/northing, and the two geometric
predicates the renderer relies on (point-in-polygon and point-to-segment
distance).
"""

import math
from dataclasses import dataclass
from typing import Tuple, Sequence

from pyproj import Transformer
from pyproj.exceptions import CRSError, ProjError

from errors import ConfigurationError, ProjectionError


Point = Tuple[float, float]


@dataclass(frozen=True)
class Bounds:
    """Represents a rectangular bounds in a grid coordinate system.

    Attributes:
        min_x: Western/left boundary (minimum easting)
        max_x: Eastern/right boundary (maximum easting)
        min_y: Southern/bottom boundary (minimum northing)
        max_y: Northern/top boundary (maximum northing)
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @classmethod
    def from_corners(cls, corners: Sequence[Sequence[float]]) -> 'Bounds':
        """Build bounds from [[min_x, min_y], [max_x, max_y]] (bottom left, top right)."""
        (min_x, min_y), (max_x, max_y) = corners
        return cls(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)

    @property
    def width(self) -> float:
        """Width of the bounds (east-west extent)."""
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        """Height of the bounds (north-south extent)."""
        return self.max_y - self.min_y


class GridProjection:
    """Converts between WGS84 and a grid's planar coordinates.

    Both directions are pure and total over the projection's valid domain.
    Outside it they raise ProjectionError rather than returning inf.

    Attributes:
        proj_def: The proj definition string of the grid projection
    """

    WGS84 = "EPSG:4326"

    def __init__(self, proj_def: str):
        """Initialize the projection adapter.

        Args:
            proj_def: Proj string or CRS identifier (e.g., "EPSG:27700")

        Raises:
            ConfigurationError: If the definition cannot be parsed
        """
        self.proj_def = proj_def
        try:
            self._from_wgs84 = Transformer.from_crs(self.WGS84, proj_def, always_xy=True)
            self._to_wgs84 = Transformer.from_crs(proj_def, self.WGS84, always_xy=True)
        except CRSError as e:
            raise ConfigurationError(f"Invalid projection definition: {proj_def!r}", e)

    def forward(self, lon: float, lat: float) -> Point:
        """Convert WGS84 coordinates to grid coordinates.

        Args:
            lon: Longitude in degrees
            lat: Latitude in degrees

        Returns:
            Tuple of (easting, northing)
        """
        return self._transform(self._from_wgs84, lon, lat, "forward")

    def inverse(self, easting: float, northing: float) -> Point:
        """Convert grid coordinates to WGS84.

        Args:
            easting: Easting in meters
            northing: Northing in meters

        Returns:
            Tuple of (longitude, latitude)
        """
        return self._transform(self._to_wgs84, easting, northing, "inverse")

    def _transform(self, transformer: Transformer, x: float, y: float, direction: str) -> Point:
        try:
            rx, ry = transformer.transform(x, y, errcheck=True)
        except ProjError as e:
            raise ProjectionError(
                f"{direction} transform failed for ({x}, {y})", (x, y), e
            )
        if not (math.isfinite(rx) and math.isfinite(ry)):
            raise ProjectionError(f"{direction} transform undefined for ({x}, {y})", (x, y))
        return (rx, ry)


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Determine if a point lies inside a polygon by ray casting.

    Counts crossings of a horizontal ray running east from the point.
    Edges use the half-open rule (yi > y) != (yj > y) and the crossing must be
    strictly east of the point, so for an axis-aligned polygon points on the
    minimum x/y boundary are inside and points on the maximum x/y boundary are
    outside. Based on
    http://www.ecse.rpi.edu/Homepages/wrf/Research/Short_Notes/pnpoly.html

    Args:
        point: (x, y) point to test
        polygon: Sequence of (x, y) vertices, closed or open

    Returns:
        True if the point is inside
    """
    x, y = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            if x < (xj - xi) * (y - yi) / (yj - yi) + xi:
                inside = not inside
        j = i
    return inside


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from point p to the segment a-b.

    The foot of the perpendicular is clamped to the segment, so points beyond
    either end measure to the nearer endpoint. A zero-length segment
    degenerates to the distance between p and a.
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length_sq = dx * dx + dy * dy

    if length_sq > 0:
        t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / length_sq
        t = max(0.0, min(1.0, t))
        foot_x = a[0] + t * dx
        foot_y = a[1] + t * dy
    else:
        foot_x, foot_y = a

    return math.hypot(p[0] - foot_x, p[1] - foot_y)
