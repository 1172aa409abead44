"""
Grid interval selection and visible grid extent.

The grid is restricted to 100m, 1km, 10km or 100km intervals. Because the
interval can only be a power of 10 and map zooms are powers of two, some zooms
show small grid squares and some large. Intermediate intervals (say 2 or 5 km)
are not offered as such squares cannot be labelled properly.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from errors import DegenerateExtentError
from grid_utils import Bounds, GridProjection
from map_view import GeoBounds

ALLOWED_INTERVALS = (100, 1000, 10000, 100000)

# (max meters per pixel, interval) staircase
INTERVAL_STEPS = (
    (1, 100),
    (20, 1000),
    (175, 10000),
)


@dataclass(frozen=True)
class GridExtent:
    """Spacing-aligned rectangle of the grid to draw, in grid meters."""
    west: int
    east: int
    south: int
    north: int
    spacing: int

    def eastings(self) -> Iterator[int]:
        """Eastings of the grid lines from west to east, both ends included."""
        return iter(range(self.west, self.east + 1, self.spacing))

    def northings(self) -> Iterator[int]:
        """Northings of the grid lines from south to north, both ends included."""
        return iter(range(self.south, self.north + 1, self.spacing))

    def corners(self) -> Tuple[Tuple[int, int], ...]:
        """SW, SE, NE, NW corners as (easting, northing)."""
        return (
            (self.west, self.south),
            (self.east, self.south),
            (self.east, self.north),
            (self.west, self.north),
        )


def select_interval(
    meters_per_pixel: float,
    min_interval: int = ALLOWED_INTERVALS[0],
    max_interval: int = ALLOWED_INTERVALS[-1]
) -> int:
    """Pick the grid interval for a map scale.

    Args:
        meters_per_pixel: Map scale at the view centre
        min_interval: Smallest interval the grid may use
        max_interval: Largest interval the grid may use

    Returns:
        Interval in meters
    """
    spacing = ALLOWED_INTERVALS[-1]
    for limit, interval in INTERVAL_STEPS:
        if meters_per_pixel <= limit:
            spacing = interval
            break

    return max(min_interval, min(max_interval, spacing))


def view_samples(geo_bounds: GeoBounds) -> List[Tuple[float, float]]:
    """The 8 geographic points whose grid coordinates bound the view.

    Corners alone are not enough: the curvature of the display projection can
    bow the grid-space outline of the view outward between them.
    """
    return list(geo_bounds.corners()) + list(geo_bounds.edge_midpoints())


def _snap_down(value: float, spacing: int) -> int:
    return int(math.floor(value / spacing)) * spacing


def _snap_up(value: float, spacing: int) -> int:
    return int(math.ceil(value / spacing)) * spacing


def compute_view_extent(
    geo_bounds: GeoBounds,
    projection: GridProjection,
    spacing: int
) -> GridExtent:
    """Grid extent enclosing the view, rounded outward to the spacing.

    Raises:
        ProjectionError: If a sample point cannot be projected
    """
    samples = [projection.forward(lon, lat) for lon, lat in view_samples(geo_bounds)]
    xs = [x for x, _ in samples]
    ys = [y for _, y in samples]

    return GridExtent(
        west=_snap_down(min(xs), spacing),
        east=_snap_up(max(xs), spacing),
        south=_snap_down(min(ys), spacing),
        north=_snap_up(max(ys), spacing),
        spacing=spacing,
    )


def clamp_extent(extent: GridExtent, bounds: Bounds, spacing: int) -> GridExtent:
    """Limit an extent to the grid bounds.

    Each edge is clamped independently and snapped outward to the spacing.

    Raises:
        DegenerateExtentError: If the extent misses the bounds on either axis
    """
    west, east, south, north = extent.west, extent.east, extent.south, extent.north

    if west < bounds.min_x:
        west = _snap_down(bounds.min_x, spacing)
    if east > bounds.max_x:
        east = _snap_up(bounds.max_x, spacing)
    if south < bounds.min_y:
        south = _snap_down(bounds.min_y, spacing)
    if north > bounds.max_y:
        north = _snap_up(bounds.max_y, spacing)

    if west > bounds.max_x or east < bounds.min_x or west > east:
        raise DegenerateExtentError(
            f"View eastings {extent.west}..{extent.east} outside grid "
            f"{bounds.min_x}..{bounds.max_x}"
        )
    if south > bounds.max_y or north < bounds.min_y or south > north:
        raise DegenerateExtentError(
            f"View northings {extent.south}..{extent.north} outside grid "
            f"{bounds.min_y}..{bounds.max_y}"
        )

    return GridExtent(west=west, east=east, south=south, north=north, spacing=spacing)


def compute_extent(
    geo_bounds: GeoBounds,
    projection: GridProjection,
    spacing: int,
    bounds: Bounds
) -> GridExtent:
    """Visible grid extent, snapped to the spacing and clamped to the grid bounds."""
    return clamp_extent(compute_view_extent(geo_bounds, projection, spacing), bounds, spacing)
