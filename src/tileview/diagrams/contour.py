"""Contour diagram: isolines at evenly spaced thresholds.

Isolines are traced with contourpy's marching squares on the transformed
field. Sample ``(row, col)`` sits at the centre of pixel ``(col, row)``, so
line vertices are shifted by half a pixel before stroking.
"""
import logging

import contourpy
import numpy as np

from .. import transforms
from ..codec import nodata_mask
from ..ranges import Range
from .configs import ContourConfig, validate_threshold_count
from .grids import grid_for_surface

logger = logging.getLogger(__name__)


def thresholds(value_range: Range, count: int) -> np.ndarray:
    """Isoline levels ``min + k * (max - min) / count`` for ``k = 0..count-1``.

    An unresolved range has no levels. A degenerate range (min == max)
    gives ``count`` identical levels.
    """
    validate_threshold_count(count)
    if not value_range.is_resolved:
        return np.empty(0, dtype=np.float64)
    step = (value_range.max - value_range.min) / count
    return value_range.min + step * np.arange(count, dtype=np.float64)


def isolines(field: np.ndarray, levels):
    """Trace isolines of a 2-D field.

    Parameters
    ----------
    field : numpy.ndarray or numpy.ma.MaskedArray
        Values of shape (rows, cols); masked cells are treated as holes.
    levels : iterable of float
        Levels to trace, in the order they are returned.

    Returns
    -------
    list of tuple
        ``(level, lines)`` pairs where each line is an (N, 2) array of
        (x, y) vertices in grid coordinates.
    """
    rows, cols = np.shape(field)
    if rows < 2 or cols < 2:
        return [(level, []) for level in levels]
    generator = contourpy.contour_generator(
        z=field, line_type=contourpy.LineType.Separate)
    return [(level, generator.lines(level)) for level in levels]


def render(config: ContourConfig, grids, surface):
    raw = grid_for_surface(grids, 0, surface)
    surface.clear()
    if config.value_range.is_degenerate:
        logger.debug("Skipping contour render, degenerate range %s", config.value_range)
        return surface

    values = transforms.apply(config.transform, raw)
    mask = nodata_mask(raw) | ~np.isfinite(values)
    field = np.ma.masked_array(
        np.where(mask, 0.0, values).reshape(surface.height, surface.width),
        mask=mask.reshape(surface.height, surface.width))

    levels = thresholds(config.value_range, config.threshold_count)
    for level, lines in isolines(field, levels):
        for line in lines:
            surface.stroke(np.asarray(line) + 0.5, config.line_width, config.color)
    return surface
