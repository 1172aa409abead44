"""
Metric grid overlay renderer.

MetricGrid draws a metric grid (national grid, UTM zone, ...) over a Web
Mercator map view. For each view it:

    1. Picks the grid interval from the map scale
    2. Computes the visible grid extent, clamped to the grid bounds
    3. Installs the clip region, if the grid has one
    4. Flattens and strokes every line of constant easting and northing
    5. Paints axis labels and square labels at the intervals that want them

Everything apart from the options is recomputed on every redraw.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from clip import ClipRegion, build_clip_region
from errors import DegenerateExtentError, ProjectionError
from flattener import DEFAULT_TOLERANCE, flatten_curve
from grid_config import GridOptions
from grid_extent import GridExtent, compute_extent, select_interval
from grid_utils import GridProjection
from labels import (
    paint_labels, plan_easting_labels, plan_northing_labels, plan_square_labels
)
from map_view import MapView
from surface import FontSpec, Pen, RasterSurface, Surface

logger = logging.getLogger(__name__)


@dataclass
class RenderStats:
    """What a redraw actually drew."""
    spacing: Optional[int] = None
    extent: Optional[GridExtent] = None
    eastings: List[int] = field(default_factory=list)
    northings: List[int] = field(default_factory=list)
    skipped_lines: int = 0
    axis_labels: int = 0
    square_labels: int = 0
    clipped: bool = False


class MetricGrid:
    """A metric grid overlay owning one drawing surface.

    Args:
        options: Grid definition and style
        surface_factory: Builds the surface from (width, height, opacity)
    """

    def __init__(
        self,
        options: GridOptions,
        surface_factory: Callable[..., Surface] = RasterSurface
    ):
        self.options = options
        self.projection = GridProjection(options.proj_def)
        self._surface_factory = surface_factory
        self._surface: Optional[Surface] = None
        self._load_callbacks: List[Callable[['MetricGrid'], None]] = []
        self._loaded = False

    @property
    def surface(self) -> Optional[Surface]:
        """The drawing surface, created on the first redraw."""
        return self._surface

    def on_load(self, callback: Callable[['MetricGrid'], None]):
        """Register a callback fired once, after the surface is first set up.

        Callbacks registered after that are called immediately.
        """
        if self._loaded:
            callback(self)
        else:
            self._load_callbacks.append(callback)

    def set_options(self, **changes):
        """Update options. The projection is rebuilt if proj_def changes."""
        options = self.options.replace(**changes)
        if options.proj_def != self.options.proj_def:
            self.projection = GridProjection(options.proj_def)
        self.options = options
        if self._surface is not None:
            self._surface.opacity = options.opacity

    def set_opacity(self, opacity: float):
        self.set_options(opacity=opacity)

    def _prepare_surface(self, view: MapView) -> Surface:
        if self._surface is None:
            self._surface = self._surface_factory(view.width, view.height, self.options.opacity)
            self._loaded = True
            for callback in self._load_callbacks:
                callback(self)
            self._load_callbacks = []
        elif self._surface.size != view.size:
            self._surface.resize(view.width, view.height)
        else:
            self._surface.clear()
        return self._surface

    def redraw(self, view: MapView) -> Optional[RenderStats]:
        """Repaint the grid for a map view.

        Args:
            view: The current map view

        Returns:
            Statistics of what was drawn, or None below the minimum zoom
        """
        surface = self._prepare_surface(view)
        options = self.options

        if view.zoom < options.min_zoom:
            logger.debug("Zoom %s below minimum %s, not drawing", view.zoom, options.min_zoom)
            return None

        spacing = select_interval(view.meters_per_pixel(), options.min_interval, options.max_interval)
        stats = RenderStats(spacing=spacing)

        try:
            extent = compute_extent(view.bounds, self.projection, spacing, options.bounds)
        except (DegenerateExtentError, ProjectionError) as e:
            logger.debug("Nothing to draw: %s", e)
            return stats
        stats.extent = extent

        clip = build_clip_region(options, self.projection, view, extent)
        stats.clipped = clip is not None

        pen = Pen(color=options.color, width=options.weight)
        if clip is None:
            self._draw_grid(surface, view, extent, None, pen, stats)
        else:
            # Outline goes outside the clip so its full width shows
            if options.draw_clip:
                surface.stroke_polygon(clip.points, pen)
            with surface.clipped(clip.points):
                self._draw_grid(surface, view, extent, clip, pen, stats)

        logger.debug(
            "Drew %s m grid: %d eastings, %d northings, %d skipped, %d axis labels, %d square labels",
            spacing, len(stats.eastings), len(stats.northings), stats.skipped_lines,
            stats.axis_labels, stats.square_labels,
        )
        return stats

    def _draw_grid(
        self,
        surface: Surface,
        view: MapView,
        extent: GridExtent,
        clip: Optional[ClipRegion],
        pen: Pen,
        stats: RenderStats
    ):
        options = self.options
        inverse = self.projection.inverse

        # Verticals of constant easting, interpolated from north to south
        height = extent.north - extent.south
        for x in extent.eastings():
            if self._stroke_line(surface, view, pen,
                                 lambda f, x=x: inverse(x, extent.north - f * height)):
                stats.eastings.append(x)
            else:
                stats.skipped_lines += 1

        # Horizontals of constant northing, interpolated from east to west
        width = extent.east - extent.west
        for y in extent.northings():
            if self._stroke_line(surface, view, pen,
                                 lambda f, y=y: inverse(extent.east - f * width, y)):
                stats.northings.append(y)
            else:
                stats.skipped_lines += 1

        font = FontSpec.parse(options.font)

        if extent.spacing in options.show_axis_labels:
            axis_labels = (plan_easting_labels(extent, options, self.projection, view, clip)
                           + plan_northing_labels(extent, options, self.projection, view, clip))
            paint_labels(surface, axis_labels, font, options.font_color, options.weight)
            stats.axis_labels = len(axis_labels)

        if extent.spacing in options.show_square_labels:
            square_labels = plan_square_labels(extent, options, self.projection, view)
            paint_labels(surface, square_labels, font, options.font_color, options.weight)
            stats.square_labels = len(square_labels)

    def _stroke_line(self, surface: Surface, view: MapView, pen: Pen, interpolate) -> bool:
        try:
            points = flatten_curve(interpolate, view.geo_to_screen, DEFAULT_TOLERANCE)
        except ProjectionError as e:
            logger.warning("Skipping grid line: %s", e)
            return False
        surface.stroke_polyline(points, pen)
        return True
