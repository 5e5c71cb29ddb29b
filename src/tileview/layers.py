"""Layers of numerical data tiles and the controller that builds them.

A layer couples a set of tile base URLs with one diagram. Tone and contour
layers calibrate their value range from the level-0 tiles when they are
created, so every later tile is scaled the same way.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import mercantile

from . import colormaps, config, transforms
from .backends import Backend, LibIdentifier
from .diagrams import CONTOUR, TONE, VECTOR, ContourConfig, Diagram, ToneConfig, VectorConfig
from .errors import ConfigurationError
from .fetcher import TileFetcher, tile_url
from .ranges import Range
from .surface import RenderSurface

logger = logging.getLogger(__name__)


@dataclass
class Layer:
    """A diagram drawn from one or more tile sources.

    Attributes
    ----------
    name : str
        Display name.
    urls : list of str
        Base URLs, one per band; every band is fetched for each tile.
    fixed : str
        Fixed dimension inserted between base URL and tile coordinates
        (e.g. a time step or a level).
    tile_size : tuple of int
        (width, height) of the tiles in pixels.
    zoom_levels : tuple of int
        (min, max) zoom levels served by the tile sources.
    diagram : Diagram
        Diagram used to render each tile.
    backend : Backend
        Map engine that shows the layer; selects the tile extent convention.
    show : bool
        Visibility flag.
    opacity : float
        Opacity in [0, 1].
    """

    name: str
    urls: List[str]
    fixed: str
    tile_size: Tuple[int, int]
    zoom_levels: Tuple[int, int]
    diagram: Diagram
    backend: Backend = Backend.XY
    show: bool = True
    opacity: float = 1.0
    revision: int = field(default=0, init=False)

    def __post_init__(self):
        self.opacity = _check_opacity(self.opacity)
        self._lib = LibIdentifier(self.backend)

    @property
    def minmax(self) -> Optional[Tuple[float, float]]:
        if self.diagram.kind == VECTOR:
            return None
        return self.diagram.value_range.as_tuple()

    def set_opacity(self, value):
        self.opacity = _check_opacity(value)

    def _refresh(self):
        self.revision += 1

    @property
    def color_index(self) -> int:
        return self.diagram.color_index

    @color_index.setter
    def color_index(self, value):
        self.diagram.change_color_map(value)
        self._refresh()

    @property
    def threshold_count(self) -> int:
        return self.diagram.threshold_count

    @threshold_count.setter
    def threshold_count(self, value):
        self.diagram.set_threshold_count(value)
        self._refresh()

    @property
    def spacing(self) -> Tuple[int, int]:
        return self.diagram.spacing

    @spacing.setter
    def spacing(self, value):
        self.diagram.set_spacing(value)
        self._refresh()

    def check_zoom(self, z: int):
        lo, hi = self.zoom_levels
        if not lo <= z <= hi:
            raise ValueError(f"Zoom level {z} outside the range {lo}-{hi} of layer '{self.name}'")

    def tile_urls(self, z: int, x: int, y: int) -> List[str]:
        return [tile_url(url, self.fixed, z, x, y) for url in self.urls]

    def tile_bounds(self, z: int, x: int, y: int):
        """Extent of a tile in the coordinates of the layer's backend.

        XY layers use pixel coordinates, sphere layers longitude/latitude
        and projected layers Web Mercator metres.
        """
        width, height = self.tile_size

        def pixel_extent():
            return (x * width, y * height, (x + 1) * width, (y + 1) * height)

        def lonlat_extent():
            return tuple(mercantile.bounds(x, y, z))

        def mercator_extent():
            return tuple(mercantile.xy_bounds(x, y, z))

        return self._lib.select(pixel_extent, lonlat_extent, mercator_extent)()

    def tiles(self, zoom: int):
        """All (z, x, y) tile coordinates of one zoom level."""
        self.check_zoom(zoom)

        def xy_tiles():
            return [(zoom, x, y) for y, x in
                    itertools.product(range(2 ** zoom), range(2 ** zoom))]

        def web_tiles():
            return [(t.z, t.x, t.y) for t in
                    mercantile.tiles(-180.0, -85.051129, 180.0, 85.051129, zoom)]

        return self._lib.select(xy_tiles, web_tiles, web_tiles)()

    async def render_tile(self, z: int, x: int, y: int) -> RenderSurface:
        """Fetch and render one tile onto a fresh surface, faded by the layer opacity."""
        self.check_zoom(z)
        surface = await self.diagram.draw(self.tile_urls(z, x, y), RenderSurface(*self.tile_size))
        surface.fade(self.opacity)
        return surface


def _check_opacity(value):
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Opacity must be within [0, 1], got {value}")
    return value


def make_diagram(kind: str, transform=None, minmax=None, prop=None,
                 fetcher: Optional[TileFetcher] = None) -> Diagram:
    """Build a diagram of ``kind``.

    Parameters
    ----------
    kind : str
        'tone', 'contour' or 'vector'.
    transform : callable or str, optional
        Sample transform, or the name of one in :mod:`tileview.transforms`.
    minmax : tuple of float, optional
        Fixed value range. None or (0, 0) computes it from the data.
    prop : int or tuple, optional
        Colour table id (tone), threshold count (contour) or glyph spacing
        (vector).
    """
    if isinstance(transform, str):
        transform = transforms.get(transform)
    transform = transform or transforms.identity
    if kind == TONE:
        cfg = ToneConfig(color_index=0 if prop is None else int(prop),
                         transform=transform, value_range=minmax)
    elif kind == CONTOUR:
        cfg = ContourConfig(threshold_count=10 if prop is None else prop,
                            transform=transform, value_range=minmax,
                            color=tuple(config.settings.get("contour_color", (0, 0, 0, 255))))
    elif kind == VECTOR:
        cfg = VectorConfig(spacing=(16, 16) if prop is None else prop, transform=transform,
                           color=tuple(config.settings.get("vector_color", (0, 0, 0, 255))))
    else:
        raise ConfigurationError(f"Unknown diagram type '{kind}'")
    if kind == TONE:
        colormaps.lookup(cfg.color_index)
    return Diagram(cfg, fetcher)


class LayerController:
    """Create and keep the layers of one viewer.

    Parameters
    ----------
    root_url : str
        Root URL that layer base URLs are relative to.
    backend : Backend or str
        Map engine backend, or a projection code.
    fetcher : TileFetcher, optional
        Shared fetcher for all layers.
    """

    def __init__(self, root_url: str, backend=Backend.XY, fetcher: Optional[TileFetcher] = None):
        self.root_url = root_url.rstrip("/")
        self.lib = LibIdentifier(backend)
        self.fetcher = fetcher or TileFetcher()
        self._layers: List[Layer] = []

    @property
    def backend(self) -> Backend:
        return self.lib.backend

    def _absolute(self, url: str) -> str:
        if "://" in url:
            return url.rstrip("/")
        return f"{self.root_url}/{url.strip('/')}"

    async def create(self, kind: str, name: str, urls: Sequence[str], fixed: str,
                     tile_size: Tuple[int, int] = (256, 256),
                     zoom_levels: Tuple[int, int] = (0, 0),
                     transform=None, show: bool = True, opacity: float = 1.0,
                     minmax: Optional[Tuple[float, float]] = None, prop=None) -> Layer:
        """Create a layer, calibrating its value range from the level-0 tiles.

        Raises
        ------
        ConfigurationError
            If the diagram parameters are invalid.
        TileFetchError
            If the calibration tiles cannot be fetched.
        """
        if not urls:
            raise ConfigurationError(f"Layer '{name}' needs at least one tile URL")
        diagram = make_diagram(kind, transform, minmax, prop, self.fetcher)
        base_urls = [self._absolute(url) for url in urls]
        tile_size = tuple(int(s) for s in tile_size)
        if kind in (TONE, CONTOUR):
            level0 = [tile_url(url, fixed, 0, 0, 0) for url in base_urls]
            lo, hi = await diagram.calc_min_max(level0, tile_size)
            logger.info("Layer '%s' value range %s - %s", name, lo, hi)
        return Layer(name=name, urls=base_urls, fixed=fixed, tile_size=tile_size,
                     zoom_levels=tuple(zoom_levels), diagram=diagram,
                     backend=self.backend, show=show, opacity=opacity)

    def add(self, layer: Layer) -> int:
        self._layers.append(layer)
        return len(self._layers)

    def get(self) -> List[Layer]:
        return list(self._layers)

    def remove(self, name: str) -> Layer:
        for idx, layer in enumerate(self._layers):
            if layer.name == name:
                return self._layers.pop(idx)
        raise KeyError(name)
