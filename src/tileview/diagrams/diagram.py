"""Diagram dispatch and the fetch/decode/render protocol.

:func:`render` picks the renderer that matches the config variant.
:class:`Diagram` ties a config to a :class:`~tileview.fetcher.TileFetcher`
and implements the two entry points used by layers: ``draw`` (fetch, decode,
tighten the range while it is not fixed, paint) and ``calc_min_max``
(fetch and decode only, skipped once the range is known).
"""
import logging
from typing import Tuple

from .. import colormaps
from ..errors import ConfigurationError, NotApplicableError
from ..fetcher import TileFetcher
from ..ranges import Range
from . import contour, tone, vector
from .configs import (ContourConfig, ToneConfig, VectorConfig,
                      validate_spacing, validate_threshold_count)

logger = logging.getLogger(__name__)

_RENDERERS = {
    ToneConfig: tone.render,
    ContourConfig: contour.render,
    VectorConfig: vector.render,
}


def render(config, grids, surface):
    """Paint ``grids`` onto ``surface`` with the renderer of ``config``.

    Parameters
    ----------
    config : ToneConfig, ContourConfig or VectorConfig
        Diagram configuration.
    grids : list of numpy.ndarray
        Decoded sample grids, each of length width*height.
    surface : RenderSurface
        Target surface, painted in place.

    Returns
    -------
    RenderSurface
        The painted surface.
    """
    try:
        renderer = _RENDERERS[type(config)]
    except KeyError:
        raise ConfigurationError(f"Unsupported diagram config {type(config).__name__}") from None
    return renderer(config, grids, surface)


def _size_of(surface) -> Tuple[int, int]:
    if isinstance(surface, tuple):
        return surface
    return (surface.width, surface.height)


class Diagram:
    """A diagram variant bound to a tile fetcher.

    Parameters
    ----------
    config : ToneConfig, ContourConfig or VectorConfig
        Variant configuration, owned by this diagram.
    fetcher : TileFetcher, optional
        Fetcher used by ``draw`` and ``calc_min_max``.
    """

    def __init__(self, config, fetcher=None):
        if type(config) not in _RENDERERS:
            raise ConfigurationError(f"Unsupported diagram config {type(config).__name__}")
        self.config = config
        self.fetcher = fetcher or TileFetcher()

    def __repr__(self):
        return f"Diagram({self.config!r})"

    @property
    def kind(self) -> str:
        return self.config.kind

    def which(self, tone, contour, vector):
        """Return the argument that belongs to this diagram's variant."""
        return {ToneConfig: tone, ContourConfig: contour, VectorConfig: vector}[type(self.config)]

    def _require(self, prop, *config_types):
        if not isinstance(self.config, config_types):
            raise NotApplicableError(prop, self.kind)
        return self.config

    # Tone
    @property
    def color_index(self) -> int:
        return self._require("color_index", ToneConfig).color_index

    def change_color_map(self, color_index: int):
        """Swap the colour table. The value range is left untouched."""
        cfg = self._require("color_index", ToneConfig)
        colormaps.lookup(color_index)
        cfg.color_index = int(color_index)

    # Contour
    @property
    def threshold_count(self) -> int:
        return self._require("threshold_count", ContourConfig).threshold_count

    def set_threshold_count(self, count: int):
        cfg = self._require("threshold_count", ContourConfig)
        cfg.threshold_count = validate_threshold_count(count)

    # Vector
    @property
    def spacing(self) -> Tuple[int, int]:
        return self._require("spacing", VectorConfig).spacing

    def set_spacing(self, spacing):
        cfg = self._require("spacing", VectorConfig)
        cfg.spacing = validate_spacing(spacing)

    # Range
    @property
    def value_range(self) -> Range:
        return self._require("value_range", ToneConfig, ContourConfig).value_range

    @property
    def range_fixed(self) -> bool:
        return self._require("value_range", ToneConfig, ContourConfig).range_fixed

    def fix_range(self, lo: float, hi: float):
        """Pin the value range; later draws no longer widen it."""
        cfg = self._require("value_range", ToneConfig, ContourConfig)
        try:
            cfg.value_range = Range.fixed(lo, hi)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        cfg.range_fixed = True

    def reset_range(self):
        """Forget the value range so it is computed from the data again."""
        cfg = self._require("value_range", ToneConfig, ContourConfig)
        cfg.value_range = Range.unresolved()
        cfg.range_fixed = False

    def _accumulates(self) -> bool:
        return isinstance(self.config, (ToneConfig, ContourConfig)) and not self.config.range_fixed

    def _keep_range(self, value_range: Range):
        # Merge rather than overwrite so overlapping draws cannot shrink the range
        if value_range is not None and not self.config.range_fixed:
            self.config.value_range = self.config.value_range.union(value_range)

    async def draw(self, urls, surface):
        """Fetch the tiles at ``urls`` and paint them onto ``surface``.

        While the range is not fixed, every decoded sample widens it before
        painting.

        Raises
        ------
        TileFetchError
            If any tile cannot be fetched; the surface is left untouched.
        """
        start = self.config.value_range if self._accumulates() else None
        grids, value_range = await self.fetcher.fetch_and_accumulate(
            urls, _size_of(surface), start)
        self._keep_range(value_range)
        return render(self.config, grids, surface)

    async def calc_min_max(self, urls, surface) -> Tuple[float, float]:
        """Resolve the value range from the tiles at ``urls`` without painting.

        Returns immediately, without fetching, when the range is already
        known.

        Returns
        -------
        tuple of float
            (min, max); (inf, -inf) if the tiles hold no valid sample.
        """
        current = self.value_range
        if current.is_resolved:
            return current.as_tuple()
        _, value_range = await self.fetcher.fetch_and_accumulate(
            urls, _size_of(surface), current)
        self._keep_range(value_range)
        logger.debug("Resolved value range %s", self.config.value_range)
        return self.config.value_range.as_tuple()
