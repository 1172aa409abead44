"""
Tests for the render_grid command line.

Run with: pytest tests/test_render_grid.py -v
"""

import json

from PIL import Image

from render_grid import load_options, main


class TestLoadOptions:
    """Tests for option loading from presets and config files."""

    def test_default_preset(self):
        assert load_options(None, None, False).name == "British National Grid"

    def test_square_labels(self):
        options = load_options("irish", None, True)
        assert options.show_square_labels == (100, 1000, 10000, 100000)

    def test_config_file(self, tmp_path):
        path = tmp_path / "grid.json"
        path.write_text(json.dumps({"preset": "utm30n", "weight": 1}))
        assert load_options(None, path, False).weight == 1


class TestMain:
    """Tests for the command line entry point."""

    def test_png(self, tmp_path, capsys):
        output = tmp_path / "paris.png"
        code = main(["--grid", "utm31n", "--lat", "48.85", "--lon", "2.35", "--zoom", "12",
                     "--width", "320", "--height", "240", "--output", str(output)])
        assert code == 0
        assert Image.open(output).size == (320, 240)
        assert "Interval: 10000 m" in capsys.readouterr().out

    def test_svg(self, tmp_path):
        output = tmp_path / "dublin.svg"
        code = main(["--grid", "irish", "--lat", "53.35", "--lon", "-6.26", "--zoom", "9",
                     "--width", "320", "--height", "240", "--format", "svg",
                     "--square-labels", "--output", str(output)])
        assert code == 0
        assert "<svg" in output.read_text()

    def test_unknown_grid(self, tmp_path, capsys):
        code = main(["--grid", "mars", "--lat", "0", "--lon", "0", "--zoom", "5",
                     "--output", str(tmp_path / "x.png")])
        assert code == 1
        assert "Error" in capsys.readouterr().out
