"""
Tests for metric_grid module (end to end).

Run with: pytest tests/test_metric_grid.py -v
"""

import pytest

from errors import ConfigurationError, ProjectionError
from grid_extent import GridExtent
from grids import utm_grid
from map_view import MapView
from metric_grid import MetricGrid, RenderStats
from surface import RasterSurface, SvgSurface


class TestRedraw:
    """Tests for MetricGrid.redraw."""

    def test_grid_covered_by_view(self, test_options, overview_view):
        """At 100km spacing only the bound edges are drawn."""
        grid = MetricGrid(test_options)
        stats = grid.redraw(overview_view)

        assert stats.spacing == 100000
        assert stats.extent == GridExtent(west=0, east=100000, south=0, north=100000, spacing=100000)
        assert stats.eastings == [0, 100000]
        assert stats.northings == [0, 100000]
        assert stats.skipped_lines == 0
        assert stats.axis_labels == 0
        assert stats.clipped is False
        assert grid.surface.image.getbbox() is not None

    def test_detail_view(self, test_options, detail_view):
        grid = MetricGrid(test_options)
        stats = grid.redraw(detail_view)

        assert stats.spacing == 10000
        assert 50000 in stats.eastings
        assert 50000 in stats.northings
        assert all(e % 10000 == 0 for e in stats.eastings)
        assert stats.axis_labels >= 2
        assert stats.square_labels == 0

    def test_square_labels(self, test_options, overview_view):
        options = test_options.replace(show_square_labels=[100000], square_namer=lambda e, n: "AA")
        stats = MetricGrid(options).redraw(overview_view)
        assert stats.square_labels == 1

    def test_below_min_zoom(self, test_options, overview_view):
        grid = MetricGrid(test_options.replace(min_zoom=10))
        assert grid.redraw(overview_view) is None
        assert grid.surface.image.getbbox() is None

    def test_view_outside_grid(self, test_options):
        grid = MetricGrid(test_options)
        view = MapView(center_lat=50.5, center_lon=-20, zoom=9, width=512, height=512)
        stats = grid.redraw(view)

        assert stats.extent is None
        assert stats.eastings == []
        assert grid.surface.image.getbbox() is None

    def test_view_across_antimeridian(self):
        """A view straddling 180 degrees only draws the lines near it."""
        view = MapView(center_lat=-17, center_lon=179.95, zoom=10, width=1024, height=768)
        stats = MetricGrid(utm_grid(60, south=True)).redraw(view)

        assert stats.spacing == 10000
        assert stats.extent.east - stats.extent.west <= 200000
        assert stats.extent.north - stats.extent.south <= 160000
        assert len(stats.eastings) + len(stats.northings) < 40

    def test_redraw_clears_previous_frame(self, test_options, overview_view):
        grid = MetricGrid(test_options)
        grid.redraw(overview_view)
        grid.redraw(MapView(center_lat=50.5, center_lon=-20, zoom=9, width=1024, height=1024))
        assert grid.surface.image.getbbox() is None

    def test_surface_follows_view_size(self, test_options, overview_view, detail_view):
        grid = MetricGrid(test_options)
        grid.redraw(overview_view)
        assert grid.surface.size == (1024, 1024)
        grid.redraw(detail_view)
        assert grid.surface.size == (1024, 768)
        assert grid.surface.image.size == (1024, 768)

    def test_clip_polygon(self, test_options, overview_view):
        options = test_options.replace(clip=[[0, 0], [100000, 0], [0, 100000]], draw_clip=True)
        stats = MetricGrid(options).redraw(overview_view)
        assert stats.clipped is True
        assert stats.eastings == [0, 100000]

    def test_clip_outline_not_clipped(self, test_options, detail_view, projection):
        """The outer half of a drawn clip outline stays visible."""
        options = test_options.replace(
            clip=[[0, 0], [100000, 0], [0, 100000]], draw_clip=True, weight=10
        )
        grid = MetricGrid(options)
        stats = grid.redraw(detail_view)
        assert stats.clipped is True

        # About 3.5 pixels outside the hypotenuse, clear of any grid line
        x, y = detail_view.geo_to_screen(*projection.inverse(45060, 55060))
        assert grid.surface.image.getpixel((round(x), round(y)))[3] > 0

    def test_clipped_area_is_empty(self, test_options, overview_view, projection):
        """Lines outside the clip triangle are not visible."""
        options = test_options.replace(clip=[[0, 0], [100000, 0], [0, 100000]])
        grid = MetricGrid(options)
        grid.redraw(overview_view)

        x, y = overview_view.geo_to_screen(*projection.inverse(100000, 90000))
        assert grid.surface.image.getpixel((round(x), round(y)))[3] == 0

    def test_failing_lines_are_skipped(self, test_options, overview_view):
        grid = MetricGrid(test_options)

        def inverse(easting, northing):
            raise ProjectionError("undefined")

        grid.projection.inverse = inverse
        stats = grid.redraw(overview_view)
        assert stats.skipped_lines == 4
        assert stats.eastings == []
        assert stats.northings == []

    def test_svg_surface(self, test_options, detail_view):
        grid = MetricGrid(test_options, surface_factory=SvgSurface)
        stats = grid.redraw(detail_view)
        svg = grid.surface.tostring()
        assert isinstance(stats, RenderStats)
        assert svg.count("<polyline") == len(stats.eastings) + len(stats.northings)
        assert "<mask" in svg


class TestLifecycle:
    """Tests for load notification and option updates."""

    def test_on_load_fires_once(self, test_options, overview_view):
        grid = MetricGrid(test_options)
        calls = []
        grid.on_load(calls.append)
        assert calls == []

        grid.redraw(overview_view)
        grid.redraw(overview_view)
        assert calls == [grid]

    def test_on_load_after_load(self, test_options, overview_view):
        grid = MetricGrid(test_options)
        grid.redraw(overview_view)
        calls = []
        grid.on_load(calls.append)
        assert calls == [grid]

    def test_set_opacity(self, test_options, overview_view):
        grid = MetricGrid(test_options)
        grid.redraw(overview_view)
        grid.set_opacity(0.25)
        assert grid.options.opacity == 0.25
        assert grid.surface.opacity == 0.25

    def test_set_options_invalid(self, test_options):
        grid = MetricGrid(test_options)
        with pytest.raises(ConfigurationError):
            grid.set_options(weight=-1)
        assert grid.options is test_options

    def test_set_options_rebuilds_projection(self, test_options):
        grid = MetricGrid(test_options)
        old_projection = grid.projection
        grid.set_options(color="#f00")
        assert grid.projection is old_projection

        new_proj = test_options.proj_def.replace("+lon_0=0", "+lon_0=1")
        grid.set_options(proj_def=new_proj)
        assert grid.projection is not old_projection
        assert grid.projection.proj_def == new_proj

    def test_surface_factory(self, test_options, overview_view):
        grid = MetricGrid(test_options, surface_factory=RasterSurface)
        assert grid.surface is None
        grid.redraw(overview_view)
        assert isinstance(grid.surface, RasterSurface)
        assert grid.surface.opacity == test_options.opacity
