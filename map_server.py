#!/usr/bin/env python3
"""
Metric Grid - Web Server

A simple Flask server that:
1. Serves a Leaflet viewer page with the grid overlays
2. Renders transparent XYZ overlay tiles for any grid preset
3. Renders single views to PNG or SVG

Usage:
    python map_server.py

Then open http://localhost:8080 in your browser.
"""

from flask import Flask, send_file, request, jsonify, Response

from errors import ConfigurationError
from grid_extent import ALLOWED_INTERVALS
from grids import GRID_PRESETS, get_grid
from map_view import MapView
from metric_grid import MetricGrid
from surface import RasterSurface, SvgSurface

app = Flask(__name__)

MAX_TILE_ZOOM = 22
MAX_RENDER_SIZE = 4096

EXAMPLE_GRIDS = ["utm30n", "utm31n", "utm33s"]


def grid_options(name: str, square_labels: bool = False):
    """Look up a grid preset. Raises ConfigurationError for unknown names."""
    options = get_grid(name)
    if square_labels:
        options = options.replace(show_square_labels=ALLOWED_INTERVALS)
    return options


@app.route('/')
def index():
    """Serve the grid viewer page."""
    return send_file('grid_viewer.html')


@app.route('/api/grids', methods=['GET'])
def list_grids():
    """List the named grid presets. Any UTM zone is available as utm<zone><n|s>."""
    return jsonify({
        'presets': sorted(GRID_PRESETS),
        'examples': EXAMPLE_GRIDS,
    })


@app.route('/tiles/<grid>/<int:z>/<int:x>/<int:y>.png')
def tile(grid, z, x, y):
    """Render one transparent 256px overlay tile."""
    try:
        options = grid_options(grid, request.args.get('squares') == '1')
    except ConfigurationError as e:
        return jsonify({'error': str(e)}), 404

    if z > MAX_TILE_ZOOM or not (0 <= x < 2 ** z and 0 <= y < 2 ** z):
        return jsonify({'error': f'No tile {z}/{x}/{y}'}), 400

    metric_grid = MetricGrid(options)
    metric_grid.redraw(MapView.from_tile(z, x, y))
    return Response(metric_grid.surface.to_png_bytes(), mimetype='image/png')


@app.route('/api/render', methods=['GET'])
def render_view():
    """Render a single map view.

    Query parameters: grid, lat, lon, zoom, width, height, format (png or svg)
    """
    try:
        grid = request.args.get('grid', 'british')
        lat = float(request.args['lat'])
        lon = float(request.args['lon'])
        zoom = float(request.args['zoom'])
        width = int(request.args.get('width', 1024))
        height = int(request.args.get('height', 768))
    except (KeyError, ValueError) as e:
        return jsonify({'error': f'Bad or missing parameter: {e}'}), 400

    fmt = request.args.get('format', 'png')
    if fmt not in ('png', 'svg'):
        return jsonify({'error': f'Unknown format: {fmt}'}), 400
    if not (0 < width <= MAX_RENDER_SIZE and 0 < height <= MAX_RENDER_SIZE):
        return jsonify({'error': f'Size must be 1..{MAX_RENDER_SIZE} pixels'}), 400
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return jsonify({'error': 'lat/lon out of range'}), 400

    try:
        options = grid_options(grid, request.args.get('squares') == '1')
    except ConfigurationError as e:
        return jsonify({'error': str(e)}), 400

    view = MapView(center_lat=lat, center_lon=lon, zoom=zoom, width=width, height=height)

    if fmt == 'svg':
        metric_grid = MetricGrid(options, surface_factory=SvgSurface)
        metric_grid.redraw(view)
        return Response(metric_grid.surface.tostring(), mimetype='image/svg+xml')

    metric_grid = MetricGrid(options, surface_factory=RasterSurface)
    metric_grid.redraw(view)
    return Response(metric_grid.surface.to_png_bytes(), mimetype='image/png')


if __name__ == '__main__':
    PORT = 8080  # 5000 clashes with AirPlay on macOS

    print("=" * 50)
    print("Metric Grid - Web Server")
    print("=" * 50)
    print()
    print(f"Open your browser to: http://localhost:{PORT}")
    print()
    print("Press Ctrl+C to stop the server")
    print("=" * 50)

    app.run(debug=False, port=PORT, threaded=True)
