#!/usr/bin/env python3
"""
Render a metric grid overlay for one map view to PNG or SVG.

Usage:
    python render_grid.py --grid british --lat 54.5 --lon -3 --zoom 7
    python render_grid.py --grid utm31n --lat 48.85 --lon 2.35 --zoom 12 --format svg
    python render_grid.py --config grid_config.json --lat 53.3 --lon -6.3 --zoom 10
"""

import sys
from pathlib import Path
from typing import List, Optional

from errors import ConfigurationError
from grid_config import GridOptions, load_grid_config
from grid_extent import ALLOWED_INTERVALS
from grids import get_grid
from map_view import MapView
from metric_grid import MetricGrid
from surface import RasterSurface, SvgSurface

SURFACES = {
    "png": RasterSurface,
    "svg": SvgSurface,
}


def load_options(grid: Optional[str], config: Optional[Path], square_labels: bool) -> GridOptions:
    """Grid options from a preset name or a JSON config file."""
    if config is not None:
        options = load_grid_config(config)
    else:
        options = get_grid(grid or "british")

    if square_labels:
        options = options.replace(show_square_labels=ALLOWED_INTERVALS)
    return options


def render(options: GridOptions, view: MapView, fmt: str, output: Path):
    """Render one view and write it to output. Returns the render stats."""
    grid = MetricGrid(options, surface_factory=SURFACES[fmt])
    stats = grid.redraw(view)
    grid.surface.save(output)
    return stats


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for grid rendering."""
    import argparse

    parser = argparse.ArgumentParser(description='Render a metric grid overlay for a map view')
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--grid', help='Grid preset: british, irish or utm<zone><n|s> (default: british)')
    source.add_argument('--config', type=Path, help='JSON grid config file')
    parser.add_argument('--lat', type=float, required=True, help='Latitude of the view centre')
    parser.add_argument('--lon', type=float, required=True, help='Longitude of the view centre')
    parser.add_argument('--zoom', type=float, required=True, help='Web Mercator zoom level')
    parser.add_argument('--width', type=int, default=1024, help='Image width in pixels (default: 1024)')
    parser.add_argument('--height', type=int, default=768, help='Image height in pixels (default: 768)')
    parser.add_argument('--format', choices=sorted(SURFACES), default='png', help='Output format')
    parser.add_argument('--output', type=Path, help='Output file (default: <grid>_z<zoom>.<format>)')
    parser.add_argument('--square-labels', action='store_true',
                        help='Label grid squares at every interval')

    args = parser.parse_args(argv)

    try:
        options = load_options(args.grid, args.config, args.square_labels)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    view = MapView(center_lat=args.lat, center_lon=args.lon, zoom=args.zoom,
                   width=args.width, height=args.height)
    output = args.output
    if output is None:
        stem = args.config.stem if args.config else (args.grid or "british")
        output = Path(f"{stem}_z{args.zoom:g}.{args.format}")

    print("=" * 60)
    print(f"Metric Grid: {options.name}")
    print("=" * 60)
    print(f"Center: {args.lat:.4f}°N, {args.lon:.4f}°E")
    print(f"Zoom: {args.zoom:g} ({view.meters_per_pixel():.1f} m/px)")
    print(f"Size: {args.width} x {args.height} px")

    stats = render(options, view, args.format, output)

    if stats is None:
        print(f"  Zoom below the grid's minimum ({options.min_zoom}), nothing drawn")
    elif stats.extent is None:
        print("  View is outside the grid, nothing drawn")
    else:
        print(f"  Interval: {stats.spacing} m")
        print(f"  Lines: {len(stats.eastings)} eastings, {len(stats.northings)} northings")
        if stats.skipped_lines:
            print(f"  Skipped {stats.skipped_lines} line(s) that could not be projected")
        print(f"  Labels: {stats.axis_labels} axis, {stats.square_labels} square")
        if stats.clipped:
            print("  Clipped to grid outline")

    print("\n" + "=" * 60)
    print(f"Saved {output}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
