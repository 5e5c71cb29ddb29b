"""Tests for the tileview.cli module."""

import json
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from tileview.cli import app


runner = CliRunner()

BASE = "https://tiles.example.com/t2m"
TILE_URL = BASE + "/surface/0/0/0.png"


@pytest.fixture
def served(tile_server, png_tile):
    """Serve one 4x4 tile and route the CLI's fetcher to it."""
    tile_server.tiles = {TILE_URL: png_tile(np.arange(1, 17).reshape(4, 4))}
    with patch("tileview.cli.TileFetcher", lambda relay=None: tile_server.fetcher()):
        yield tile_server


class TestCallback:
    """Tests for the CLI callback (help text)."""

    def test_help_shows_description(self):
        """--help should show the app description."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "numerical data tiles" in result.output.lower()

    def test_help_lists_commands(self):
        """--help should list available commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("render", "minmax", "render-layers", "init-config", "colormaps"):
            assert command in result.output

    def test_invalid_command(self):
        """An unknown command should exit with a non-zero code."""
        result = runner.invoke(app, ["shoot"])

        assert result.exit_code != 0


class TestRenderCommand:
    """Tests for the render CLI command."""

    def test_writes_png(self, served, temp_dir):
        """render should write a tile of the requested size."""
        out = temp_dir / "out.png"
        result = runner.invoke(app, ["render", BASE, "--fixed", "surface", "--size", "4",
                                     "--color-index", "1", "--out", str(out)])

        assert result.exit_code == 0, result.output
        assert "Wrote" in result.output
        with Image.open(out) as img:
            assert img.size == (4, 4)
            assert img.mode == "RGBA"

    def test_missing_tile_fails(self, served, temp_dir):
        """A tile that cannot be fetched should exit with code 1."""
        result = runner.invoke(app, ["render", BASE, "--z", "3", "--size", "4",
                                     "--out", str(temp_dir / "out.png")])

        assert result.exit_code == 1
        assert not (temp_dir / "out.png").exists()

    def test_unknown_kind_fails(self, served, temp_dir):
        """An unknown diagram type should exit with code 1."""
        result = runner.invoke(app, ["render", BASE, "--kind", "heatmap",
                                     "--out", str(temp_dir / "out.png")])

        assert result.exit_code == 1


class TestMinmaxCommand:
    """Tests for the minmax CLI command."""

    def test_prints_range(self, served):
        """minmax should print the resolved value range."""
        result = runner.invoke(app, ["minmax", BASE, "--fixed", "surface", "--size", "4"])

        assert result.exit_code == 0, result.output
        assert "min=1.0 max=16.0" in result.output

    @patch("tileview.config.change_env")
    def test_changes_env_when_not_default(self, mock_change_env, served):
        """minmax should change environment when env is not DEFAULT."""
        result = runner.invoke(app, ["minmax", BASE, "--fixed", "surface", "--size", "4",
                                     "--env", "production"])

        mock_change_env.assert_called_once_with("production")
        assert result.exit_code == 0

    @patch("tileview.config.change_env")
    def test_skips_env_change_for_default(self, mock_change_env, served):
        """minmax should not change environment for DEFAULT."""
        result = runner.invoke(app, ["minmax", BASE, "--fixed", "surface", "--size", "4"])

        mock_change_env.assert_not_called()
        assert result.exit_code == 0


class TestInitConfigCommand:
    """Tests for the init-config CLI command."""

    def test_writes_layer_config(self, temp_dir):
        """init-config should write layer_config.json into the directory."""
        result = runner.invoke(app, ["init-config", "--root-url", "https://example.com/tiles",
                                     "--dir", str(temp_dir)])

        assert result.exit_code == 0
        with open(temp_dir / "layer_config.json") as f:
            data = json.load(f)
        assert data["root_url"] == "https://example.com/tiles"


class TestRenderLayersCommand:
    """Tests for the render-layers CLI command."""

    def test_renders_each_layer(self, temp_dir, tile_server, png_tile):
        """render-layers should save one PNG per layer and tile."""
        tile_server.tiles = {TILE_URL: png_tile(np.arange(1, 17).reshape(4, 4))}
        config_path = temp_dir / "layer_config.json"
        with open(config_path, "w") as f:
            json.dump({
                "root_url": "https://tiles.example.com",
                "backend": "XY",
                "layers": [{"name": "temperature", "type": "tone", "urls": ["t2m"],
                            "fixed": "surface", "tile_size": [4, 4],
                            "zoom": {"min": 0, "max": 0}}],
            }, f)

        with patch("tileview.layers.TileFetcher", lambda: tile_server.fetcher()):
            result = runner.invoke(app, ["render-layers", str(config_path),
                                         "--out-dir", str(temp_dir / "tiles")])

        assert result.exit_code == 0, result.output
        assert (temp_dir / "tiles" / "temperature" / "0" / "0" / "0.png").exists()

    def test_skips_hidden_layers(self, temp_dir, tile_server, png_tile):
        """render-layers should not write tiles for layers with show set to false."""
        tile_server.tiles = {TILE_URL: png_tile(np.arange(1, 17).reshape(4, 4))}
        config_path = temp_dir / "layer_config.json"
        with open(config_path, "w") as f:
            json.dump({
                "root_url": "https://tiles.example.com",
                "backend": "XY",
                "layers": [{"name": "temperature", "type": "tone", "urls": ["t2m"],
                            "fixed": "surface", "tile_size": [4, 4], "minmax": [0, 20],
                            "zoom": {"min": 0, "max": 0}, "show": False, "opacity": 0.2}],
            }, f)

        with patch("tileview.layers.TileFetcher", lambda: tile_server.fetcher()):
            result = runner.invoke(app, ["render-layers", str(config_path),
                                         "--out-dir", str(temp_dir / "tiles")])

        assert result.exit_code == 0, result.output
        assert "Wrote 0 tile(s)" in result.output
        assert not (temp_dir / "tiles" / "temperature").exists()


class TestColormapsCommand:
    """Tests for the colormaps CLI command."""

    def test_lists_palettes(self):
        """colormaps should list the registered colour tables."""
        result = runner.invoke(app, ["colormaps"])

        assert result.exit_code == 0
        assert "viridis" in result.output
