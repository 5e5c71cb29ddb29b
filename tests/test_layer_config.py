"""Tests for the tileview.layer_config module."""

import asyncio
import json
from unittest.mock import patch

import numpy as np
import pytest

from tileview import layer_config
from tileview.backends import Backend
from tileview.errors import LayerConfigError
from tileview.layers import LayerController


def write_config(directory, data):
    path = directory / "layer_config.json"
    with open(path, "w") as f:
        json.dump(data, f)
    return path


class TestGenerateFile:
    """Tests for the generate_file function."""

    def test_creates_json_file(self, temp_dir):
        """generate_file should create a layer_config.json file."""
        path = layer_config.generate_file(root_url="https://example.com/tiles",
                                          config_file_path=temp_dir)

        assert path == temp_dir / "layer_config.json"
        assert path.exists()

    def test_json_has_required_structure(self, temp_dir):
        """Generated JSON should have root_url, backend and layers keys."""
        path = layer_config.generate_file(root_url="https://example.com/tiles",
                                          config_file_path=temp_dir, backend="3d Sphere")
        with open(path) as f:
            data = json.load(f)

        assert data["root_url"] == "https://example.com/tiles"
        assert data["backend"] == "3d Sphere"
        assert isinstance(data["layers"], list)

    def test_one_sample_layer_per_diagram_type(self, temp_dir):
        """The starter file should hold a tone, a contour and a vector layer."""
        path = layer_config.generate_file(root_url="https://example.com/tiles",
                                          config_file_path=temp_dir)
        with open(path) as f:
            data = json.load(f)

        assert [layer["type"] for layer in data["layers"]] == ["tone", "contour", "vector"]
        for layer in data["layers"]:
            assert "name" in layer
            assert "urls" in layer
            assert "zoom" in layer

    def test_generated_file_reads_back(self, temp_dir):
        """A generated file should be accepted by read."""
        path = layer_config.generate_file(root_url="https://example.com/tiles",
                                          config_file_path=temp_dir)
        layer_file = layer_config.read(path)

        assert len(layer_file.layers) == 3
        assert layer_file.layers[2].prop == (16, 16)
        assert layer_file.layers[0].minmax == (-40.0, 40.0)


class TestRead:
    """Tests for the read function."""

    def test_reads_layers(self, temp_dir, sample_layer_config):
        """read should parse every layer and its variant property."""
        layer_file = layer_config.read(write_config(temp_dir, sample_layer_config))

        assert layer_file.root_url == "https://tiles.example.com"
        assert layer_file.backend is Backend.XY
        tone, wind = layer_file.layers
        assert tone.kind == "tone"
        assert tone.prop == 1
        assert tone.minmax == (0.0, 20.0)
        assert tone.zoom_levels == (0, 1)
        assert tone.tile_size == (4, 4)
        assert wind.urls == ["u10", "v10"]
        assert wind.prop == (2, 2)

    def test_invalid_json(self, temp_dir):
        """Malformed JSON should raise LayerConfigError."""
        path = temp_dir / "layer_config.json"
        path.write_text("{not json")

        with pytest.raises(LayerConfigError):
            layer_config.read(path)

    def test_unknown_type(self, temp_dir, sample_layer_config):
        """A layer of unknown type should be refused."""
        sample_layer_config["layers"][0]["type"] = "heatmap"

        with pytest.raises(LayerConfigError, match="heatmap"):
            layer_config.read(write_config(temp_dir, sample_layer_config))

    def test_missing_urls(self, temp_dir, sample_layer_config):
        """A layer without urls should be refused."""
        del sample_layer_config["layers"][0]["urls"]

        with pytest.raises(LayerConfigError, match="urls"):
            layer_config.read(write_config(temp_dir, sample_layer_config))

    def test_property_of_other_variant(self, temp_dir, sample_layer_config):
        """A tone layer must not carry a contour threshold count."""
        sample_layer_config["layers"][0]["threshold_count"] = 5

        with pytest.raises(LayerConfigError, match="threshold_count"):
            layer_config.read(write_config(temp_dir, sample_layer_config))

    def test_bad_minmax(self, temp_dir, sample_layer_config):
        """A minmax that is not a pair of numbers should be refused."""
        sample_layer_config["layers"][0]["minmax"] = ["low", "high"]

        with pytest.raises(LayerConfigError):
            layer_config.read(write_config(temp_dir, sample_layer_config))

    def test_projection_code_backend(self, temp_dir, sample_layer_config):
        """Projection codes other than XY and 3d Sphere select the projections backend."""
        sample_layer_config["backend"] = "EPSG:3413"

        layer_file = layer_config.read(write_config(temp_dir, sample_layer_config))
        assert layer_file.backend is Backend.PROJECTIONS


class TestBuild:
    """Tests for the build function."""

    def test_builds_layers(self, temp_dir, sample_layer_config, tile_server):
        """build should create every layer without fetching fixed-range tiles."""
        layer_file = layer_config.read(write_config(temp_dir, sample_layer_config))
        controller = LayerController(layer_file.root_url, layer_file.backend,
                                     fetcher=tile_server.fetcher())

        result = asyncio.run(layer_config.build(layer_file, controller))

        assert result is controller
        names = [layer.name for layer in controller.get()]
        assert names == ["temperature", "wind"]
        temperature = controller.get()[0]
        assert temperature.color_index == 1
        assert temperature.minmax == (0.0, 20.0)
        assert temperature.urls == ["https://tiles.example.com/t2m"]
        assert tile_server.requests == []

    def test_starter_layers_draw_in_display_units(self, temp_dir, tile_server, png_tile):
        """The starter Temperature and Pressure layers should draw Kelvin and Pa tiles visibly."""
        with patch("tileview.config.tile_size_pair", return_value=(16, 16)):
            path = layer_config.generate_file(root_url="https://tiles.example.com",
                                              config_file_path=temp_dir)
        layer_file = layer_config.read(path)
        kelvin = np.linspace(250.0, 300.0, 256).reshape(16, 16)
        pascal = np.linspace(95000.0, 105000.0, 256).reshape(16, 16)
        tile_server.tiles = {
            "https://tiles.example.com/t2m/surface/0/0/0.png": png_tile(kelvin),
            "https://tiles.example.com/msl/surface/0/0/0.png": png_tile(pascal),
        }
        controller = LayerController(layer_file.root_url, layer_file.backend,
                                     fetcher=tile_server.fetcher())
        asyncio.run(layer_config.build(layer_file, controller))
        layers = {layer.name: layer for layer in controller.get()}

        tone = asyncio.run(layers["Temperature"].render_tile(0, 0, 0)).pixels()
        contour = asyncio.run(layers["Pressure"].render_tile(0, 0, 0)).pixels()

        assert len(np.unique(tone.reshape(-1, 4), axis=0)) > 1
        assert (contour[..., 3] > 0).any()


class TestParseLayer:
    """Tests for malformed optional layer fields."""

    def test_null_zoom_uses_defaults(self, temp_dir, sample_layer_config):
        """A null zoom entry should fall back to zoom level 0."""
        sample_layer_config["layers"][0]["zoom"] = None

        layer_file = layer_config.read(write_config(temp_dir, sample_layer_config))
        assert layer_file.layers[0].zoom_levels == (0, 0)

    def test_zoom_not_an_object(self, temp_dir, sample_layer_config):
        """A zoom entry that is not an object should raise LayerConfigError."""
        sample_layer_config["layers"][0]["zoom"] = [0, 4]

        with pytest.raises(LayerConfigError):
            layer_config.read(write_config(temp_dir, sample_layer_config))
