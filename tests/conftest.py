"""
Shared fixtures: a small test grid on a plain transverse Mercator projection.

The grid covers 100km x 100km starting at its false origin (lat 50, lon 0),
so grid coordinates are easy to reason about and no datum shift is involved.
"""

import pytest

from grid_config import GridOptions
from grid_utils import GridProjection
from map_view import MapView

TEST_PROJ = "+proj=tmerc +lat_0=50 +lon_0=0 +k=1 +x_0=0 +y_0=0 +ellps=WGS84 +units=m +no_defs"
TEST_BOUNDS = [[0, 0], [100000, 100000]]


@pytest.fixture
def projection():
    return GridProjection(TEST_PROJ)


@pytest.fixture
def test_options():
    return GridOptions(proj_def=TEST_PROJ, bounds=TEST_BOUNDS, name="test grid")


@pytest.fixture
def overview_view(projection):
    """Zoom 9 view (about 196 m/px) that contains the whole test grid."""
    lon, lat = projection.inverse(50000, 50000)
    return MapView(center_lat=lat, center_lon=lon, zoom=9, width=1024, height=1024)


@pytest.fixture
def detail_view(projection):
    """Zoom 12 view (about 25 m/px, 10km interval) over the middle of the test grid."""
    lon, lat = projection.inverse(50000, 50000)
    return MapView(center_lat=lat, center_lon=lon, zoom=12, width=1024, height=768)
