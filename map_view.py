"""
Web Mercator map viewport.

Stands in for the host web map: it knows the current centre, zoom and pixel
size of the drawing surface, and converts between geographic coordinates and
screen pixels the way a Leaflet map does (256px tiles, origin at the top left
of the visible area).
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Tuple

from pyproj import Geod, Transformer


TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798  # Web Mercator latitude limit
MERCATOR_HALF_WORLD = 20037508.342789244  # meters from origin to antimeridian

_to_mercator = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
_from_mercator = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)
_geod = Geod(ellps="WGS84")


@dataclass(frozen=True)
class GeoBounds:
    """Geographic bounding box of the visible map area, in degrees."""
    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> Tuple[float, float]:
        """Centre as (lon, lat), the plain mean of the edges."""
        return ((self.west + self.east) / 2, (self.south + self.north) / 2)

    def corners(self) -> Tuple[Tuple[float, float], ...]:
        """SW, NE, NW, SE corners as (lon, lat)."""
        return (
            (self.west, self.south),
            (self.east, self.north),
            (self.west, self.north),
            (self.east, self.south),
        )

    def edge_midpoints(self) -> Tuple[Tuple[float, float], ...]:
        """Middles of the S, N, W and E edges as (lon, lat)."""
        center_lon, center_lat = self.center
        return (
            (center_lon, self.south),
            (center_lon, self.north),
            (self.west, center_lat),
            (self.east, center_lat),
        )


@dataclass(frozen=True)
class MapView:
    """A Web Mercator viewport.

    Attributes:
        center_lat: Latitude of the view centre
        center_lon: Longitude of the view centre
        zoom: Zoom level, may be fractional
        width: Surface width in pixels
        height: Surface height in pixels
    """
    center_lat: float
    center_lon: float
    zoom: float
    width: int
    height: int

    @classmethod
    def from_tile(cls, z: int, x: int, y: int, tile_size: int = TILE_SIZE) -> 'MapView':
        """Create the view that exactly covers XYZ tile (x, y) at zoom z."""
        world = cls._world_size(z)
        px = (x + 0.5) * tile_size
        py = (y + 0.5) * tile_size
        lon, lat = cls._unproject(px, py, world)
        return cls(center_lat=lat, center_lon=lon, zoom=z, width=tile_size, height=tile_size)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @staticmethod
    def _world_size(zoom: float) -> float:
        return TILE_SIZE * 2 ** zoom

    @staticmethod
    def _project(lon: float, lat: float, world: float) -> Tuple[float, float]:
        # x is linear in longitude; pyproj would wrap it into [-180, 180]
        lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
        _, my = _to_mercator.transform(0.0, lat)
        mx = lon / 180 * MERCATOR_HALF_WORLD
        px = (mx + MERCATOR_HALF_WORLD) / (2 * MERCATOR_HALF_WORLD) * world
        py = (MERCATOR_HALF_WORLD - my) / (2 * MERCATOR_HALF_WORLD) * world
        return (px, py)

    @staticmethod
    def _unproject(px: float, py: float, world: float) -> Tuple[float, float]:
        mx = px / world * (2 * MERCATOR_HALF_WORLD) - MERCATOR_HALF_WORLD
        my = MERCATOR_HALF_WORLD - py / world * (2 * MERCATOR_HALF_WORLD)
        _, lat = _from_mercator.transform(0.0, my)
        return (mx / MERCATOR_HALF_WORLD * 180, lat)

    @cached_property
    def _pixel_origin(self) -> Tuple[float, float]:
        cx, cy = self._project(self.center_lon, self.center_lat, self._world_size(self.zoom))
        return (cx - self.width / 2, cy - self.height / 2)

    def geo_to_screen(self, lon: float, lat: float) -> Tuple[float, float]:
        """Convert (lon, lat) to a screen pixel (x, y).

        The longitude is taken on the copy of the world nearest the view
        centre, so points across the antimeridian land beside the view.
        """
        lon += 360 * round((self.center_lon - lon) / 360)
        px, py = self._project(lon, lat, self._world_size(self.zoom))
        ox, oy = self._pixel_origin
        return (px - ox, py - oy)

    def screen_to_geo(self, x: float, y: float) -> Tuple[float, float]:
        """Convert a screen pixel (x, y) to (lon, lat).

        Longitudes are not wrapped: east of the antimeridian they exceed 180.
        """
        ox, oy = self._pixel_origin
        return self._unproject(x + ox, y + oy, self._world_size(self.zoom))

    @property
    def bounds(self) -> GeoBounds:
        """Geographic bounds of the visible area, west always below east."""
        west, north = self.screen_to_geo(0, 0)
        east, south = self.screen_to_geo(self.width, self.height)
        return GeoBounds(south=south, west=west, north=north, east=east)

    def meters_per_pixel(self) -> float:
        """Map scale at the view centre.

        Moves one pixel east of the centre and measures the geodesic distance,
        which captures the local scale distortion of Web Mercator.
        """
        world = self._world_size(self.zoom)
        px, py = self._project(self.center_lon, self.center_lat, world)
        lon1, lat1 = self._unproject(px, py, world)
        lon2, lat2 = self._unproject(px + 1, py, world)
        _, _, distance = _geod.inv(lon1, lat1, lon2, lat2)
        return distance
