"""
Grid labelling.

Axis labels go on the west and south sides of the view, in the middle of the
vertical or horizontal edge of a grid square the way Ordnance Survey label
their printed maps, so labels of neighbouring lines never collide. Each label
rubs out the piece of grid line beneath it before the text is drawn.

Square labels go in the bottom left corner of each grid square and combine
the 100km square name with the easting and northing codes.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from clip import ClipRegion
from errors import ProjectionError
from grid_config import GridOptions
from grid_extent import GridExtent
from grid_utils import GridProjection, point_in_polygon
from map_view import MapView
from surface import FontSpec, Surface

logger = logging.getLogger(__name__)

AXIS_SOUTH = "axis-south"        # easting labels
AXIS_WEST = "axis-west"          # northing labels
SQUARE_CORNER = "square-corner"  # square labels

HUNDRED_KM = 100000
SQUARE_LABEL_OFFSET = 2  # pixels right of and above the square's corner

_SUBSCRIPT_DIGITS = str.maketrans("0123456789", "₀₁₂₃₄₅₆₇₈₉")


@dataclass(frozen=True)
class LabelSpec:
    """A label ready to paint.

    Attributes:
        text: Label text
        anchor: Screen point the label is placed relative to
        alignment: AXIS_SOUTH, AXIS_WEST or SQUARE_CORNER
    """
    text: str
    anchor: Tuple[float, float]
    alignment: str


def format_east_or_north(value: float, spacing: int, show_100km: bool = False) -> str:
    """Format an easting or northing within its 100km square.

    Most grids repeat their numbering every 100km. Below 1km spacing three
    digits are shown, below 10km two, otherwise one.

    Args:
        value: Easting or northing in meters
        spacing: Grid interval in meters
        show_100km: Prefix the hundreds of km in subscript digits

    Returns:
        Label text, e.g. 123456 at 100m spacing gives "234"
    """
    value = int(value)
    hundreds = value // HUNDRED_KM
    within = value % HUNDRED_KM

    if spacing < 1000:
        text = f"{within // 100:03d}"
    elif spacing < 10000:
        text = f"{within // 1000:02d}"
    else:
        text = str(within // 10000)

    if show_100km:
        text = str(hundreds).translate(_SUBSCRIPT_DIGITS) + text
    return text


def _on_surface(x: float, y: float, view: MapView) -> bool:
    return 0 < x < view.width and 0 < y < view.height


def _inside_clip(
    grid_point: Tuple[float, float],
    screen_point: Tuple[float, float],
    options: GridOptions,
    clip: Optional[ClipRegion]
) -> bool:
    """Clip test for axis labels: grid space for polygons, screen space for rectangles."""
    if options.clip:
        return point_in_polygon(grid_point, options.clip)
    if clip is not None:
        return clip.contains(*screen_point)
    return True


def plan_easting_labels(
    extent: GridExtent,
    options: GridOptions,
    projection: GridProjection,
    view: MapView,
    clip: Optional[ClipRegion] = None
) -> List[LabelSpec]:
    """Place one label per vertical grid line, nearest the south of the view.

    Each line is scanned northwards from the south edge of the extent and is
    labelled at the first square edge midpoint that is visible.
    """
    half = extent.spacing / 2
    labels = []

    for x in extent.eastings():
        if x >= options.bounds.max_x:
            continue
        for y in extent.northings():
            grid_point = (x, y + half)
            try:
                screen = view.geo_to_screen(*projection.inverse(*grid_point))
            except ProjectionError as e:
                logger.debug("No easting label for %s: %s", x, e)
                break

            if not _on_surface(*screen, view):
                continue
            if not _inside_clip(grid_point, screen, options, clip):
                continue

            text = format_east_or_north(x, extent.spacing, options.show_axis_100km)
            labels.append(LabelSpec(text, screen, AXIS_SOUTH))
            break

    return labels


def plan_northing_labels(
    extent: GridExtent,
    options: GridOptions,
    projection: GridProjection,
    view: MapView,
    clip: Optional[ClipRegion] = None
) -> List[LabelSpec]:
    """Place one label per horizontal grid line, nearest the west of the view."""
    half = extent.spacing / 2
    labels = []

    for y in extent.northings():
        if y >= options.bounds.max_y:
            continue
        for x in extent.eastings():
            grid_point = (x + half, y)
            try:
                screen = view.geo_to_screen(*projection.inverse(*grid_point))
            except ProjectionError as e:
                logger.debug("No northing label for %s: %s", y, e)
                break

            if not _on_surface(*screen, view):
                continue
            if not _inside_clip(grid_point, screen, options, clip):
                continue

            text = format_east_or_north(y, extent.spacing, options.show_axis_100km)
            labels.append(LabelSpec(text, screen, AXIS_WEST))
            break

    return labels


def plan_square_labels(
    extent: GridExtent,
    options: GridOptions,
    projection: GridProjection,
    view: MapView
) -> List[LabelSpec]:
    """Label every grid square whose bottom left corner is on screen.

    At the 100km interval only the square name is shown.
    """
    labels = []
    for y in extent.northings():
        if y >= options.bounds.max_y:
            continue
        for x in extent.eastings():
            if x >= options.bounds.max_x:
                continue
            try:
                screen = view.geo_to_screen(*projection.inverse(x, y))
            except ProjectionError as e:
                logger.debug("No square label at (%s, %s): %s", x, y, e)
                continue
            if not _on_surface(*screen, view):
                continue

            text = options.square_namer(x, y)
            if extent.spacing < HUNDRED_KM:
                show_100km = options.show_axis_100km
                text += (format_east_or_north(x, extent.spacing, show_100km)
                         + format_east_or_north(y, extent.spacing, show_100km))
            labels.append(LabelSpec(text, screen, SQUARE_CORNER))

    return labels


def paint_labels(
    surface: Surface,
    labels: List[LabelSpec],
    font: FontSpec,
    color: str,
    weight: float
):
    """Draw labels, rubbing out the grid line under each axis label first.

    Args:
        surface: Surface to draw on
        labels: Planned labels
        font: Label font
        color: Text color
        weight: Grid line width, sets the size of the rub-out
    """
    rub = weight * 3
    text_height = font.size

    for label in labels:
        x, y = label.anchor

        if label.alignment == SQUARE_CORNER:
            surface.fill_text(label.text, x + SQUARE_LABEL_OFFSET, y - SQUARE_LABEL_OFFSET, font, color)
            continue

        text_width = surface.text_width(label.text, font)
        if label.alignment == AXIS_SOUTH:
            with surface.erasing():
                surface.fill_rect(x - rub / 2, y - text_height, rub, text_height * 1.2)
            surface.fill_text(label.text, x - text_width / 2, y, font, color)
        elif label.alignment == AXIS_WEST:
            with surface.erasing():
                surface.fill_rect(x - text_width * 0.1, y - rub / 2, text_width * 1.2, rub)
            surface.fill_text(label.text, x, y + text_height / 2, font, color)
        else:
            raise ValueError(f"Unknown label alignment: {label.alignment}")
