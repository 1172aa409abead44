"""
Adaptive curve flattening.

Approximates a curve by a screen-space polyline with the fewest segments that
keep every chord within a pixel tolerance of the curve. Grid lines of constant
easting or northing project as curves on a Web Mercator map, most strongly at
low zooms, and tend to straight lines as the map is zoomed in. The same routine
draws clip polygon edges.

Subdivision is iterative with an explicit stack and a hard evaluation budget.
Curves whose screen image has an inflection (e.g. a great circle crossing the
equator on Web Mercator) may not converge locally; in that case the points
accumulated so far are returned as a best-effort approximation. Adapted from
the OpenLayers graticule approach.
"""

import logging
from fractions import Fraction
from typing import Callable, List, NamedTuple, Tuple

from errors import FlattenerBudgetExceeded
from grid_utils import point_to_segment_distance

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000  # midpoint evaluations per curve
DEFAULT_TOLERANCE = 1.0  # pixels

ScreenPoint = Tuple[float, float]


class _Node(NamedTuple):
    fraction: Fraction
    screen: ScreenPoint


def tessellate(
    interpolate: Callable[[float], Tuple[float, float]],
    to_screen: Callable[[float, float], ScreenPoint],
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
    strict: bool = False
) -> List[Tuple[Fraction, ScreenPoint]]:
    """Flatten a parametrized curve, keeping the curve fraction of each vertex.

    Args:
        interpolate: Maps a fraction in [0, 1] to a geographic (lon, lat) point.
            0 gives the start of the curve and 1 the end.
        to_screen: Maps (lon, lat) to a screen pixel (x, y)
        tolerance: Maximum distance in pixels between a segment's chord and
            the curve's midpoint for the segment to be accepted
        max_iterations: Budget of midpoint evaluations
        strict: Raise FlattenerBudgetExceeded instead of returning a partial
            polyline when the budget runs out

    Returns:
        List of (fraction, screen point) ordered from the start of the curve
        to its end

    Raises:
        ValueError: If tolerance is not positive
        FlattenerBudgetExceeded: If strict and the budget runs out
        ProjectionError: If interpolate or to_screen fail for any fraction
    """
    if tolerance <= 0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")

    def node(fraction: Fraction) -> _Node:
        lon, lat = interpolate(float(fraction))
        return _Node(fraction, to_screen(lon, lat))

    # Each stack entry is a segment (a, b) with a before b along the curve.
    # Pushing the later half first means the earlier half is popped next, so
    # vertices come off in curve order.
    stack = [(node(Fraction(0)), node(Fraction(1)))]
    seen = set()
    coords = []
    evaluations = 0

    while stack:
        if evaluations >= max_iterations:
            points = [screen for _, screen in coords]
            message = (f"Curve did not converge within {max_iterations} evaluations, "
                       f"returning {len(points)} points")
            if strict:
                raise FlattenerBudgetExceeded(message, points)
            logger.warning(message)
            break

        a, b = stack.pop()

        if a.fraction not in seen:
            coords.append((a.fraction, a.screen))
            seen.add(a.fraction)

        m = node((a.fraction + b.fraction) / 2)
        evaluations += 1

        if point_to_segment_distance(m.screen, a.screen, b.screen) < tolerance:
            # Flat enough: drop the midpoint and keep the far end
            coords.append((b.fraction, b.screen))
            seen.add(b.fraction)
        else:
            stack.append((m, b))
            stack.append((a, m))

    return coords


def flatten_curve(
    interpolate: Callable[[float], Tuple[float, float]],
    to_screen: Callable[[float, float], ScreenPoint],
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
    strict: bool = False
) -> List[ScreenPoint]:
    """Flatten a parametrized curve into a screen polyline.

    See tessellate() for the arguments. Returns only the screen points.
    """
    return [screen for _, screen in
            tessellate(interpolate, to_screen, tolerance, max_iterations, strict)]


def linear_interpolator(
    start: Tuple[float, float],
    end: Tuple[float, float],
    inverse: Callable[[float, float], Tuple[float, float]]
) -> Callable[[float], Tuple[float, float]]:
    """Interpolate linearly in grid space from start to end, returning (lon, lat).

    Args:
        start: Grid (easting, northing) at fraction 0
        end: Grid (easting, northing) at fraction 1
        inverse: Grid to geographic transform
    """
    x1, y1 = start
    dx = end[0] - x1
    dy = end[1] - y1

    def interpolate(frac: float) -> Tuple[float, float]:
        return inverse(x1 + frac * dx, y1 + frac * dy)

    return interpolate
