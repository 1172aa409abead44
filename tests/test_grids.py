"""
Tests for grids module.

Run with: pytest tests/test_grids.py -v
"""

import mgrs
import pytest

from errors import ConfigurationError
from grid_utils import GridProjection
from grids import (
    GRID_PRESETS, british_grid, british_square_name, get_grid, irish_grid,
    irish_square_name, make_utm_square_namer, utm_grid, utm_proj_def
)


class TestBritishGrid:
    """Tests for the British National Grid preset."""

    @pytest.mark.parametrize("easting, northing, expected", [
        (651409, 313177, "TG"),   # Norwich
        (216667, 771285, "NN"),   # Ben Nevis
        (530000, 180000, "TQ"),   # London
        (0, 0, "SV"),
        (699999, 1299999, "JM"),
        (50000, 550000, "NV"),
    ])
    def test_square_names(self, easting, northing, expected):
        assert british_square_name(easting, northing) == expected

    def test_table_follows_os_lettering(self):
        """Every square matches the Ordnance Survey 5x5 letter scheme (no I)."""
        letters = "ABCDEFGHJKLMNOPQRSTUVWXYZ"
        for n100k in range(13):
            for e100k in range(7):
                l1 = (19 - n100k) - (19 - n100k) % 5 + (e100k + 10) // 5
                l2 = (19 - n100k) * 5 % 25 + e100k % 5
                expected = letters[l1] + letters[l2]
                assert british_square_name(e100k * 100000 + 1, n100k * 100000 + 1) == expected

    @pytest.mark.parametrize("easting, northing", [
        (-1, 0), (700000, 0), (0, 1300000), (0, -50000),
    ])
    def test_outside(self, easting, northing):
        assert british_square_name(easting, northing) == "--"

    def test_projection(self):
        """London projects into square TQ."""
        options = british_grid()
        easting, northing = GridProjection(options.proj_def).forward(-0.1276, 51.5072)
        assert british_square_name(easting, northing) == "TQ"

    def test_clipped(self):
        options = british_grid()
        assert options.clip[0] == options.clip[-1]
        assert options.bounds.max_y == 1300000

    def test_overrides(self):
        options = british_grid(opacity=0.3, show_square_labels=[100000])
        assert options.opacity == 0.3
        assert options.show_square_labels == (100000,)
        assert options.name == "British National Grid"


class TestIrishGrid:
    """Tests for the Irish Grid preset."""

    @pytest.mark.parametrize("easting, northing, expected", [
        (315000, 234000, "O"),    # Dublin
        (0, 0, "V"),
        (450000, 450000, "E"),
        (50000, 450000, "A"),
    ])
    def test_square_names(self, easting, northing, expected):
        assert irish_square_name(easting, northing) == expected

    def test_outside(self):
        assert irish_square_name(500000, 0) == "--"

    def test_projection(self):
        """Dublin projects into square O."""
        options = irish_grid()
        easting, northing = GridProjection(options.proj_def).forward(-6.2603, 53.3498)
        assert irish_square_name(easting, northing) == "O"


class TestUtmGrid:
    """Tests for UTM zone presets, cross-checked against the mgrs package."""

    @pytest.mark.parametrize("lat, lon, zone, south, expected", [
        (48.8566, 2.3522, 31, False, "DQ"),     # Paris
        (-33.8688, 151.2093, 56, True, "LH"),   # Sydney
    ])
    def test_square_names(self, lat, lon, zone, south, expected):
        projection = GridProjection(utm_proj_def(zone, south))
        easting, northing = projection.forward(lon, lat)
        name = make_utm_square_namer(zone, south)(easting, northing)
        assert name == expected
        assert name == mgrs.MGRS().toMGRS(lat, lon)[3:5]

    @pytest.mark.parametrize("lat, lon, zone", [
        (51.5, -0.1, 30),
        (40.7, -74.0, 18),
        (35.7, 139.7, 54),
        (64.1, -21.9, 27),
    ])
    def test_matches_mgrs_north(self, lat, lon, zone):
        easting, northing = GridProjection(utm_proj_def(zone)).forward(lon, lat)
        assert make_utm_square_namer(zone)(easting, northing) == mgrs.MGRS().toMGRS(lat, lon)[3:5]

    def test_column_outside_zone(self):
        namer = make_utm_square_namer(31)
        assert namer(50000, 0).startswith("-")

    def test_bounds(self):
        assert utm_grid(30).bounds.min_y == 0
        assert utm_grid(30, south=True).bounds.max_y == 10000000

    def test_proj_def(self):
        assert "+zone=33" in utm_grid(33).proj_def
        assert "+south" in utm_grid(33, south=True).proj_def
        assert "+south" not in utm_grid(33).proj_def

    @pytest.mark.parametrize("zone", [0, 61, -5])
    def test_invalid_zone(self, zone):
        with pytest.raises(ConfigurationError):
            utm_grid(zone)


class TestGetGrid:
    """Tests for get_grid name resolution."""

    def test_presets(self):
        assert sorted(GRID_PRESETS) == ["british", "irish"]
        assert get_grid("british").name == "British National Grid"
        assert get_grid("Irish").name == "Irish Grid"

    def test_utm_names(self):
        assert get_grid("utm31n").name == "UTM zone 31N"
        assert get_grid("UTM56S").name == "UTM zone 56S"

    def test_overrides(self):
        assert get_grid("utm31n", opacity=0.2).opacity == 0.2

    @pytest.mark.parametrize("name", ["mars", "utm", "utmn", "utm31", "utm31x", "utm99n"])
    def test_unknown(self, name):
        with pytest.raises(ConfigurationError):
            get_grid(name)
