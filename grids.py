"""
Preset grid definitions: British National Grid, Irish Grid and UTM.

Square naming is data, so each grid gets a plain naming function closed over
its letter table rather than a subclass. The British and Irish clip polygons
keep the two grids from drawing over each other at low zooms.
"""

from typing import Dict, Callable

from errors import ConfigurationError
from grid_config import GridOptions, SquareNamer

HUNDRED_KM = 100000

# === British National Grid (EPSG:27700) ===
BRITISH_PROJ_DEF = ("+proj=tmerc +lat_0=49 +lon_0=-2 +k=0.9996012717 +x_0=400000 +y_0=-100000 "
                    "+ellps=airy +datum=OSGB36 +units=m +no_defs")
BRITISH_BOUNDS = [[0, 0], [700000, 1300000]]
BRITISH_CLIP = [
    [0, 0], [700000, 0], [700000, 1300000], [0, 1300000], [0, 700000],
    [100000, 650000], [150000, 600000], [190000, 550000], [200000, 500000], [200000, 400000],
    [0, 0],
]

# Indexed by northing km / 100, easting km / 100
BRITISH_SQUARES = [
    ["SV", "SW", "SX", "SY", "SZ", "TV", "TW"],
    ["SQ", "SR", "SS", "ST", "SU", "TQ", "TR"],
    ["SL", "SM", "SN", "SO", "SP", "TL", "TM"],
    ["SF", "SG", "SH", "SJ", "SK", "TF", "TG"],
    ["SA", "SB", "SC", "SD", "SE", "TA", "TB"],
    ["NV", "NW", "NX", "NY", "NZ", "OV", "OW"],
    ["NQ", "NR", "NS", "NT", "NU", "OQ", "OR"],
    ["NL", "NM", "NN", "NO", "NP", "OL", "OM"],
    ["NF", "NG", "NH", "NJ", "NK", "OF", "OG"],
    ["NA", "NB", "NC", "ND", "NE", "OA", "OB"],
    ["HV", "HW", "HX", "HY", "HZ", "JV", "JW"],
    ["HQ", "HR", "HS", "HT", "HU", "JQ", "JR"],
    ["HL", "HM", "HN", "HO", "HP", "JL", "JM"],
]

# === Irish Grid, TM75 (EPSG:29903) ===
IRISH_PROJ_DEF = ("+proj=tmerc +lat_0=53.5 +lon_0=-8 +k=1.000035 +x_0=200000 +y_0=250000 "
                  "+ellps=mod_airy +towgs84=482.5,-130.6,564.6,-1.042,-0.214,-0.631,8.15 "
                  "+units=m +no_defs")
IRISH_BOUNDS = [[0, 0], [500000, 500000]]
IRISH_CLIP = [
    [0, 0], [290000, 0], [370000, 300000], [370000, 400000],
    [310000, 460000], [200000, 500000], [0, 500000], [0, 0],
]

# Indexed by easting km / 100, northing km / 100
IRISH_SQUARES = [
    ["V", "Q", "L", "F", "A"],
    ["W", "R", "M", "G", "B"],
    ["X", "S", "N", "H", "C"],
    ["Y", "T", "O", "J", "D"],
    ["Z", "U", "P", "K", "E"],
]

# === UTM ===
UTM_NORTH_BOUNDS = [[100000, 0], [900000, 9400000]]
UTM_SOUTH_BOUNDS = [[100000, 600000], [900000, 10000000]]

# 100km column letters (NIMA 8358.1 Appx B3): zones 1,4,..., zones 2,5,..., zones 3,6,...
UTM_COLUMN_LETTERS = ["ABCDEFGH", "JKLMNPQR", "STUVWXYZ"]

# 100km row letters, repeating every 2000km: odd zones, even zones.
# A starts at the equator going north; the southern hemisphere runs backwards from V.
UTM_ROW_LETTERS = ["ABCDEFGHJKLMNPQRSTUV", "FGHJKLMNPQRSTUVABCDE"]


def british_square_name(easting: float, northing: float) -> str:
    """Two-letter OS 100km square, or "--" outside the grid."""
    e_sq = int(easting // HUNDRED_KM)
    n_sq = int(northing // HUNDRED_KM)
    if 0 <= e_sq < 7 and 0 <= n_sq < 13:
        return BRITISH_SQUARES[n_sq][e_sq]
    return "--"


def irish_square_name(easting: float, northing: float) -> str:
    """One-letter Irish 100km square, or "--" outside the grid."""
    e_sq = int(easting // HUNDRED_KM)
    n_sq = int(northing // HUNDRED_KM)
    if 0 <= e_sq < 5 and 0 <= n_sq < 5:
        return IRISH_SQUARES[e_sq][n_sq]
    return "--"


def make_utm_square_namer(zone: int, south: bool = False) -> SquareNamer:
    """Build the MGRS-style 100km square identifier function for a UTM zone."""
    z = zone - 1
    columns = UTM_COLUMN_LETTERS[z % 3]
    rows = UTM_ROW_LETTERS[z % 2]

    def utm_square_name(easting: float, northing: float) -> str:
        x = int(easting // HUNDRED_KM)
        y = int(northing // HUNDRED_KM)
        if south:
            y -= 100  # false northing of 10,000km

        name = columns[x - 1] if 1 <= x <= 8 else "-"
        # floor modulo carries the northern sequence backwards below the equator
        return name + rows[y % 20]

    return utm_square_name


def utm_proj_def(zone: int, south: bool = False) -> str:
    proj_def = f"+proj=utm +zone={zone} +ellps=WGS84 +datum=WGS84 +units=m +no_defs"
    if south:
        proj_def += " +south"
    return proj_def


def british_grid(**overrides) -> GridOptions:
    """British National Grid, clipped so it does not overlay the Irish grid."""
    options = dict(
        name="British National Grid",
        proj_def=BRITISH_PROJ_DEF,
        bounds=BRITISH_BOUNDS,
        clip=BRITISH_CLIP,
        square_namer=british_square_name,
    )
    options.update(overrides)
    return GridOptions(**options)


def irish_grid(**overrides) -> GridOptions:
    """Irish Grid, clipped so it does not overlay the British grid."""
    options = dict(
        name="Irish Grid",
        proj_def=IRISH_PROJ_DEF,
        bounds=IRISH_BOUNDS,
        clip=IRISH_CLIP,
        square_namer=irish_square_name,
    )
    options.update(overrides)
    return GridOptions(**options)


def utm_grid(zone: int, south: bool = False, **overrides) -> GridOptions:
    """UTM grid for a zone (1..60) in the northern or southern hemisphere."""
    if not 1 <= zone <= 60:
        raise ConfigurationError(f"UTM zone must be 1..60, got {zone}")

    options = dict(
        name=f"UTM zone {zone}{'S' if south else 'N'}",
        proj_def=utm_proj_def(zone, south),
        bounds=UTM_SOUTH_BOUNDS if south else UTM_NORTH_BOUNDS,
        square_namer=make_utm_square_namer(zone, south),
    )
    options.update(overrides)
    return GridOptions(**options)


GRID_PRESETS: Dict[str, Callable[..., GridOptions]] = {
    "british": british_grid,
    "irish": irish_grid,
}


def get_grid(name: str, **overrides) -> GridOptions:
    """Resolve a grid by name: "british", "irish" or "utm<zone><n|s>" (e.g. "utm30n")."""
    key = name.strip().lower()

    if key in GRID_PRESETS:
        return GRID_PRESETS[key](**overrides)

    if key.startswith("utm") and len(key) > 4 and key[-1] in ("n", "s") and key[3:-1].isdigit():
        return utm_grid(int(key[3:-1]), key[-1] == "s", **overrides)

    raise ConfigurationError(f"Unknown grid: {name!r}. Use one of {sorted(GRID_PRESETS)} or utm<zone><n|s>")
