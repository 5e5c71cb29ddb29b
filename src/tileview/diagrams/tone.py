"""Tone diagram: colour-mapped raster."""
import numpy as np

from .. import colormaps, transforms
from ..codec import nodata_mask
from .configs import ToneConfig
from .grids import grid_for_surface

NODATA_COLOR = (255, 255, 255, 255)


def rgba_for(config: ToneConfig, raw: np.ndarray) -> np.ndarray:
    """Compute the RGBA colour of every raw sample.

    Raw no-data sentinels and samples that are non-finite before or after
    the transform are painted white.

    Returns
    -------
    numpy.ndarray
        uint8 array of shape (len(raw), 4).
    """
    raw = np.asarray(raw).reshape(-1)
    values = transforms.apply(config.transform, raw)
    table = colormaps.lookup(config.color_index)

    rgba = np.empty((raw.size, 4), dtype=np.uint8)
    rgba[:, :3] = colormaps.colorize(values, table, config.value_range)
    rgba[:, 3] = 255
    rgba[nodata_mask(raw) | ~np.isfinite(values)] = NODATA_COLOR
    return rgba


def render(config: ToneConfig, grids, surface):
    raw = grid_for_surface(grids, 0, surface)
    surface.put_pixels(rgba_for(config, raw))
    return surface
