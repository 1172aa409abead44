"""
Clip region construction for the grid overlay.

A grid can be limited to a polygon in its own coordinates (the British and
Irish grids are clipped against each other this way) or to a latitude and
longitude rectangle. Polygon clips are traced through the curve flattener so
their edges follow the display projection; rectangle clips are simply the
screen rectangle between the two projected corners.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from shapely.geometry import Point as ShapelyPoint, Polygon, box

from errors import ProjectionError
from flattener import DEFAULT_TOLERANCE, flatten_curve, linear_interpolator
from grid_config import GridOptions
from grid_extent import GridExtent
from grid_utils import GridProjection, point_in_polygon
from map_view import MapView

logger = logging.getLogger(__name__)

POLYGON = "polygon"
RECT = "rect"


@dataclass(frozen=True)
class ClipRegion:
    """Screen-space clip for one redraw.

    Attributes:
        kind: "polygon" or "rect"
        points: Outline in screen pixels
        screen_bounds: The clip rectangle, for rect clips only
    """
    kind: str
    points: Tuple[Tuple[float, float], ...]
    screen_bounds: Optional[Polygon] = None

    def contains(self, x: float, y: float) -> bool:
        if self.screen_bounds is not None:
            # Boundary counts as inside
            return self.screen_bounds.covers(ShapelyPoint(x, y))
        return point_in_polygon((x, y), self.points)


def extent_inside_clip(extent: GridExtent, clip: Sequence[Tuple[float, float]]) -> bool:
    """True if every corner of the extent is inside the clip polygon."""
    return all(point_in_polygon(corner, clip) for corner in extent.corners())


def trace_clip_polygon(
    clip: Sequence[Tuple[float, float]],
    projection: GridProjection,
    view: MapView,
    tolerance: float = DEFAULT_TOLERANCE
) -> Tuple[Tuple[float, float], ...]:
    """Flatten each edge of a grid-space polygon into one screen outline.

    Edges that cannot be projected are left out, joining their neighbours
    with a straight line.
    """
    points = []
    for start, end in zip(clip[:-1], clip[1:]):
        try:
            edge = flatten_curve(
                linear_interpolator(start, end, projection.inverse),
                view.geo_to_screen,
                tolerance,
            )
        except ProjectionError as e:
            logger.warning("Skipping clip edge %s -> %s: %s", start, end, e)
            continue

        if points and edge and points[-1] == edge[0]:
            edge = edge[1:]
        points.extend(edge)

    return tuple(points)


def build_clip_region(
    options: GridOptions,
    projection: GridProjection,
    view: MapView,
    extent: GridExtent,
    tolerance: float = DEFAULT_TOLERANCE
) -> Optional[ClipRegion]:
    """Build the clip region for a redraw.

    A clip polygon takes priority over a latitude/longitude rectangle.

    Args:
        options: Grid options holding the clip configuration
        projection: Grid projection used to trace polygon edges
        view: Current map view
        extent: Visible grid extent (already clamped to the grid bounds)
        tolerance: Pixel tolerance for tracing polygon edges

    Returns:
        The clip region, or None if nothing needs clipping
    """
    if options.clip:
        if extent_inside_clip(extent, options.clip):
            logger.debug("Extent lies inside the clip polygon, not clipping")
            return None
        return ClipRegion(POLYGON, trace_clip_polygon(options.clip, projection, view, tolerance))

    if options.lat_lon_clip_bounds:
        (south, west), (north, east) = options.lat_lon_clip_bounds
        sw_x, sw_y = view.geo_to_screen(west, south)
        ne_x, ne_y = view.geo_to_screen(east, north)
        rect = box(min(sw_x, ne_x), min(sw_y, ne_y), max(sw_x, ne_x), max(sw_y, ne_y))
        min_x, min_y, max_x, max_y = rect.bounds
        return ClipRegion(
            RECT,
            ((min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)),
            screen_bounds=rect,
        )

    return None
