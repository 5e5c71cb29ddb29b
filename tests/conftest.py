"""Shared pytest fixtures for tileview tests."""

import io
import tempfile
from pathlib import Path

import httpx
import numpy as np
import pytest
from PIL import Image

from tileview import colormaps
from tileview.codec import encode_array
from tileview.fetcher import TileFetcher


def png_bytes(values):
    """Encode a 2-D array of samples as a numerical data tile PNG."""
    buf = io.BytesIO()
    Image.fromarray(encode_array(np.asarray(values, dtype=np.float32)), mode="RGBA").save(
        buf, format="PNG")
    return buf.getvalue()


class FakeTileServer:
    """Serve tiles from a dict of URL -> PNG bytes (or HTTP status code)."""

    def __init__(self, tiles=None):
        self.tiles = dict(tiles or {})
        self.requests = []

    def handler(self, request):
        self.requests.append(request)
        url = request.url.params.get("path") or str(request.url)
        payload = self.tiles.get(url, 404)
        if isinstance(payload, int):
            return httpx.Response(payload)
        if isinstance(payload, Exception):
            raise payload
        return httpx.Response(200, content=payload, headers={"Content-Type": "image/png"})

    def fetcher(self, relay=""):
        return TileFetcher(relay=relay, timeout=5.0, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tile_server():
    """Provide an empty fake tile server."""
    return FakeTileServer()


@pytest.fixture
def ramp_field():
    """Provide a 32x32 field increasing from 1 to 64 along x and y."""
    xx, yy = np.meshgrid(np.arange(32), np.arange(32))
    return (1.0 + xx + yy).astype(np.float32)


@pytest.fixture
def sample_layer_config():
    """Provide a sample layer configuration for JSON tests."""
    return {
        "root_url": "https://tiles.example.com",
        "backend": "XY",
        "layers": [
            {
                "name": "temperature",
                "type": "tone",
                "urls": ["t2m"],
                "fixed": "surface",
                "tile_size": [4, 4],
                "zoom": {"min": 0, "max": 1},
                "transform": "identity",
                "color_index": 1,
                "minmax": [0, 20],
            },
            {
                "name": "wind",
                "type": "vector",
                "urls": ["u10", "v10"],
                "fixed": "surface",
                "tile_size": [4, 4],
                "zoom": {"min": 0, "max": 1},
                "spacing": {"x": 2, "y": 2},
            },
        ],
    }


@pytest.fixture
def png_tile():
    """Provide the helper that encodes a 2-D array as a tile PNG."""
    return png_bytes


@pytest.fixture
def palette_registry():
    """Restore the colour table registry after a test registers palettes."""
    palettes = dict(colormaps._PALETTES)
    tables = dict(colormaps._tables)
    yield colormaps
    colormaps._PALETTES.clear()
    colormaps._PALETTES.update(palettes)
    colormaps._tables.clear()
    colormaps._tables.update(tables)
