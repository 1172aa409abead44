"""
Tests for map_view module.

Run with: pytest tests/test_map_view.py -v
"""

import pytest

from map_view import GeoBounds, MapView, MAX_LATITUDE

EQUATOR_METERS_PER_PIXEL_Z0 = 156543.03392804097  # 2 * pi * 6378137 / 256


class TestGeoBounds:
    """Tests for the GeoBounds dataclass."""

    def test_center(self):
        bounds = GeoBounds(south=50, west=-2, north=52, east=2)
        assert bounds.center == (0, 51)

    def test_corners(self):
        bounds = GeoBounds(south=50, west=-2, north=52, east=2)
        assert bounds.corners() == ((-2, 50), (2, 52), (-2, 52), (2, 50))

    def test_edge_midpoints(self):
        bounds = GeoBounds(south=50, west=-2, north=52, east=2)
        assert bounds.edge_midpoints() == ((0, 50), (0, 52), (-2, 51), (2, 51))


class TestMapView:
    """Tests for the Web Mercator viewport."""

    @pytest.fixture
    def view(self):
        return MapView(center_lat=51.5, center_lon=-0.1, zoom=10, width=800, height=600)

    def test_center_is_middle_of_surface(self, view):
        x, y = view.geo_to_screen(-0.1, 51.5)
        assert x == pytest.approx(400)
        assert y == pytest.approx(300)

    def test_screen_axes(self, view):
        """East is right and north is up."""
        x_east, _ = view.geo_to_screen(0.0, 51.5)
        _, y_north = view.geo_to_screen(-0.1, 51.6)
        assert x_east > 400
        assert y_north < 300

    def test_round_trip(self, view):
        lon, lat = view.screen_to_geo(*view.geo_to_screen(-0.2, 51.45))
        assert lon == pytest.approx(-0.2, abs=1e-9)
        assert lat == pytest.approx(51.45, abs=1e-9)

    def test_bounds(self, view):
        bounds = view.bounds
        assert bounds.west < -0.1 < bounds.east
        assert bounds.south < 51.5 < bounds.north
        assert view.geo_to_screen(bounds.west, bounds.north) == pytest.approx((0, 0), abs=1e-6)

    def test_bounds_across_antimeridian(self):
        """East of the antimeridian the bounds keep counting past 180."""
        view = MapView(center_lat=-17, center_lon=179.95, zoom=10, width=1024, height=768)
        bounds = view.bounds
        assert bounds.west < 180 < bounds.east
        assert bounds.center[0] == pytest.approx(179.95, abs=1e-6)

    def test_geo_to_screen_across_antimeridian(self):
        """A wrapped longitude lands beside the view, not a world away."""
        view = MapView(center_lat=-17, center_lon=179.95, zoom=10, width=1024, height=768)
        x, _ = view.geo_to_screen(-179.9, -17)
        assert x == pytest.approx(view.geo_to_screen(180.1, -17)[0])
        assert 512 < x < 1024

    def test_size(self, view):
        assert view.size == (800, 600)

    def test_meters_per_pixel_at_equator(self):
        view = MapView(center_lat=0, center_lon=0, zoom=0, width=256, height=256)
        assert view.meters_per_pixel() == pytest.approx(EQUATOR_METERS_PER_PIXEL_Z0, rel=1e-6)

    def test_meters_per_pixel_halves_per_zoom(self):
        z9 = MapView(center_lat=0, center_lon=0, zoom=9, width=256, height=256)
        z10 = MapView(center_lat=0, center_lon=0, zoom=10, width=256, height=256)
        assert z10.meters_per_pixel() == pytest.approx(z9.meters_per_pixel() / 2, rel=1e-6)

    def test_meters_per_pixel_shrinks_with_latitude(self):
        """Web Mercator stretches the map away from the equator (cos(60) = 0.5)."""
        equator = MapView(center_lat=0, center_lon=0, zoom=9, width=256, height=256)
        sixty = MapView(center_lat=60, center_lon=0, zoom=9, width=256, height=256)
        assert sixty.meters_per_pixel() == pytest.approx(equator.meters_per_pixel() / 2, rel=0.01)

    def test_from_tile_world(self):
        """Tile 0/0/0 covers the whole Web Mercator world."""
        view = MapView.from_tile(0, 0, 0)
        assert view.size == (256, 256)
        assert view.center_lon == pytest.approx(0, abs=1e-9)
        assert view.center_lat == pytest.approx(0, abs=1e-9)
        bounds = view.bounds
        assert abs(bounds.west) == pytest.approx(180)
        assert abs(bounds.east) == pytest.approx(180)
        assert bounds.north == pytest.approx(MAX_LATITUDE, abs=1e-6)

    def test_from_tile_corners(self):
        """Tile views put the tile's corners at the surface corners."""
        view = MapView.from_tile(6, 31, 20)
        assert view.bounds.west == pytest.approx(31 / 64 * 360 - 180)
        assert view.bounds.east == pytest.approx(32 / 64 * 360 - 180)
