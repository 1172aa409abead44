"""
Configuration for a metric grid overlay.

GridOptions bundles the grid definition (projection, bounds, clipping, square
naming, interval limits) with the drawing style. It is immutable: option
updates go through replace(), which validates the result again.
"""

import json
from dataclasses import dataclass, fields, replace as dataclass_replace
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from shapely.geometry import Polygon

from errors import ConfigurationError
from grid_extent import ALLOWED_INTERVALS
from grid_utils import Bounds

PROJ_DEF_PLACEHOLDER = "must be provided"

SquareNamer = Callable[[float, float], str]


def _no_square_name(easting: float, northing: float) -> str:
    return ""


@dataclass(frozen=True)
class GridOptions:
    """Configuration for one metric grid.

    Attributes:
        proj_def: Proj string of the grid projection (required)
        bounds: Grid bounds in grid meters (required). The bounds values
            should be multiples of max_interval.
        clip: Optional closed clip polygon in grid coordinates
        lat_lon_clip_bounds: Optional ((south, west), (north, east)) clip rectangle
        draw_clip: Stroke the clip outline with the grid pen
        square_namer: Names the 100km square containing (easting, northing)
        show_axis_labels: Intervals at which axis labels are drawn
        show_axis_100km: Prefix axis labels with the 100km digits in subscript
        show_square_labels: Intervals at which square labels are drawn
        opacity: Overlay opacity, 0 to 1
        weight: Line width in pixels. 2 gives the cleanest label rub-out.
        color: Line color
        font: CSS-style font, e.g. "bold 16px Verdana"
        font_color: Label color, defaults to color
        min_interval: Smallest grid interval in meters
        max_interval: Largest grid interval in meters
        min_zoom: Minimum zoom at which the grid is drawn
        attribution: Optional attribution text
        name: Display name
    """
    proj_def: str = PROJ_DEF_PLACEHOLDER
    bounds: Optional[Bounds] = None
    clip: Optional[Tuple[Tuple[float, float], ...]] = None
    lat_lon_clip_bounds: Optional[Tuple[Tuple[float, float], Tuple[float, float]]] = None
    draw_clip: bool = False
    square_namer: SquareNamer = _no_square_name
    show_axis_labels: Tuple[int, ...] = (100, 1000, 10000)
    show_axis_100km: bool = False
    show_square_labels: Tuple[int, ...] = ()
    opacity: float = 0.7
    weight: float = 2
    color: str = "#00f"
    font: str = "bold 16px Verdana"
    font_color: Optional[str] = None
    min_interval: int = 100
    max_interval: int = 100000
    min_zoom: float = 4
    attribution: Optional[str] = None
    name: str = "metric grid"

    def __post_init__(self):
        self._normalize()
        self._validate()

    def _normalize(self):
        """Coerce JSON-style values (lists) into the frozen field types."""
        if self.bounds is not None and not isinstance(self.bounds, Bounds):
            try:
                object.__setattr__(self, "bounds", Bounds.from_corners(self.bounds))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Bounds must be [[min_x, min_y], [max_x, max_y]]: {self.bounds!r}", e)

        if self.clip is not None:
            try:
                clip = tuple((float(x), float(y)) for x, y in self.clip)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Clip must be a list of [x, y] points: {self.clip!r}", e)
            if clip and clip[0] != clip[-1]:
                clip = clip + (clip[0],)
            object.__setattr__(self, "clip", clip)

        if self.lat_lon_clip_bounds is not None:
            try:
                (south, west), (north, east) = self.lat_lon_clip_bounds
                clip_bounds = ((float(south), float(west)), (float(north), float(east)))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"lat_lon_clip_bounds must be [[south, west], [north, east]]: "
                    f"{self.lat_lon_clip_bounds!r}", e)
            object.__setattr__(self, "lat_lon_clip_bounds", clip_bounds)

        object.__setattr__(self, "show_axis_labels", tuple(self.show_axis_labels))
        object.__setattr__(self, "show_square_labels", tuple(self.show_square_labels))

        if self.font_color is None:
            object.__setattr__(self, "font_color", self.color)

    def _validate(self):
        if not self.proj_def or self.proj_def == PROJ_DEF_PLACEHOLDER:
            raise ConfigurationError("A projection definition (proj_def) must be provided")

        if self.bounds is None:
            raise ConfigurationError("Grid bounds must be provided")
        if self.bounds.width <= 0 or self.bounds.height <= 0:
            raise ConfigurationError(f"Grid bounds are empty or inverted: {self.bounds}")

        if self.clip is not None:
            if len(set(self.clip)) < 3:
                raise ConfigurationError("Clip polygon needs at least three distinct points")
            if not Polygon(self.clip).is_valid:
                raise ConfigurationError("Clip polygon must not intersect itself")

        for option in ("min_interval", "max_interval"):
            value = getattr(self, option)
            if value not in ALLOWED_INTERVALS:
                raise ConfigurationError(f"{option} must be one of {ALLOWED_INTERVALS}, got {value}")
        if self.min_interval > self.max_interval:
            raise ConfigurationError(
                f"min_interval {self.min_interval} exceeds max_interval {self.max_interval}")

        if not 0 <= self.opacity <= 1:
            raise ConfigurationError(f"opacity must be between 0 and 1, got {self.opacity}")
        if self.weight <= 0:
            raise ConfigurationError(f"weight must be positive, got {self.weight}")

    def replace(self, **changes) -> 'GridOptions':
        """Return a validated copy with some options changed."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown grid options: {', '.join(sorted(unknown))}")

        if "color" in changes and "font_color" not in changes and self.font_color == self.color:
            # font color was following the line color
            changes["font_color"] = None
        return dataclass_replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict) -> 'GridOptions':
        """Build options from JSON-style data.

        A "preset" key names a grid from grids.py; the remaining keys
        override the preset's options.
        """
        data = dict(data)
        preset = data.pop("preset", None)

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown grid options: {', '.join(sorted(unknown))}")

        if preset:
            from grids import get_grid
            return get_grid(preset, **data)
        return cls(**data)


def load_grid_config(path: Union[str, Path]) -> GridOptions:
    """Load grid options from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Grid config not found: {config_path}")

    with open(config_path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}: {e}", e)

    return GridOptions.from_dict(data)
