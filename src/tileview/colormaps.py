"""Colour tables used by tone diagrams.

Palettes are registered under integer ids and stored as ``(N, 3)`` uint8
arrays. Most of them are sampled from matplotlib colormaps; discrete
palettes can be given as hex colour lists.
"""
import logging
from typing import Dict, List, Tuple

import numpy as np
import matplotlib
from matplotlib.colors import to_rgb

from .errors import UnknownColorMapError
from .ranges import Range

logger = logging.getLogger(__name__)

TABLE_SIZE = 256

PRECIP_COLORS = [
    "#90ee90", "#66dd66", "#33cc33", "#00bb00", "#009900", "#007700",
    "#005500", "#ffff00", "#ffb300", "#ff6600", "#ff0000", "#ff00ff",
]

# id -> (name, matplotlib colormap name or list of hex colours)
_PALETTES = {
    0: ("jet", "jet"),
    1: ("viridis", "viridis"),
    2: ("rdbu", "RdBu_r"),
    3: ("coolwarm", "coolwarm"),
    4: ("gray", "gray"),
    5: ("turbo", "turbo"),
    6: ("blues", "Blues"),
    7: ("ylorrd", "YlOrRd"),
    8: ("precip", PRECIP_COLORS),
}

_tables: Dict[int, np.ndarray] = {}


def _build_table(source, size=TABLE_SIZE) -> np.ndarray:
    if isinstance(source, str):
        cmap = matplotlib.colormaps[source]
        rgba = cmap(np.linspace(0.0, 1.0, size))
        return np.round(rgba[:, :3] * 255).astype(np.uint8)
    colors = [to_rgb(c) for c in source]
    return np.round(np.array(colors) * 255).astype(np.uint8)


def lookup(color_index: int) -> np.ndarray:
    """Return the colour table registered under ``color_index``.

    Parameters
    ----------
    color_index : int
        Palette id, see :func:`names`.

    Returns
    -------
    numpy.ndarray
        Read-only ``(N, 3)`` uint8 array with N > 0.

    Raises
    ------
    UnknownColorMapError
        If no palette is registered under the id.
    """
    try:
        color_index = int(color_index)
    except (TypeError, ValueError):
        raise UnknownColorMapError(f"Invalid colormap id {color_index!r}") from None
    if color_index not in _PALETTES:
        raise UnknownColorMapError(f"No colormap registered with id {color_index}")
    if color_index not in _tables:
        table = _build_table(_PALETTES[color_index][1])
        table.setflags(write=False)
        _tables[color_index] = table
    return _tables[color_index]


def register(color_index: int, name: str, colors) -> np.ndarray:
    """Register a palette under ``color_index``, replacing any existing one.

    Parameters
    ----------
    color_index : int
        Palette id.
    name : str
        Human-readable name.
    colors : str or sequence
        A matplotlib colormap name, a list of colour specs (hex strings or
        RGB tuples in 0-1), or an ``(N, 3)`` uint8 array.
    """
    if isinstance(colors, np.ndarray) and colors.dtype == np.uint8:
        if colors.ndim != 2 or colors.shape[1] != 3 or len(colors) == 0:
            raise ValueError(f"Colour table must have shape (N, 3) with N > 0, got {colors.shape}")
        table = colors.copy()
    else:
        if not isinstance(colors, str) and len(colors) == 0:
            raise ValueError("Colour table must contain at least one colour")
        table = _build_table(colors)
    table.setflags(write=False)
    _PALETTES[int(color_index)] = (name, colors)
    _tables[int(color_index)] = table
    logger.debug("Registered colormap %s (%s) with %d entries", color_index, name, len(table))
    return table


def names() -> List[Tuple[int, str]]:
    """List ``(id, name)`` pairs of the registered palettes."""
    return [(idx, entry[0]) for idx, entry in sorted(_PALETTES.items())]


def table_index(values: np.ndarray, value_range: Range, size: int) -> np.ndarray:
    """Map values to colour table indices.

    ``index = round(size / (max - min) * (value - min))``, rounding halves
    up, clamped to ``[0, size - 1]``. A degenerate or unresolved range maps
    every value to 0.

    Parameters
    ----------
    values : numpy.ndarray
        Transformed sample values.
    value_range : Range
        Normalisation range.
    size : int
        Number of entries in the colour table.

    Returns
    -------
    numpy.ndarray
        int64 indices with the shape of ``values``.
    """
    values = np.asarray(values, dtype=np.float64)
    if size <= 0:
        raise ValueError("Colour table must contain at least one colour")
    if value_range.is_degenerate:
        return np.zeros(values.shape, dtype=np.int64)
    density = size / value_range.span
    with np.errstate(invalid="ignore", over="ignore"):
        scaled = np.floor(density * (values - value_range.min) + 0.5)
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=size - 1, neginf=0.0)
    return np.clip(scaled, 0, size - 1).astype(np.int64)


def colorize(values: np.ndarray, table: np.ndarray, value_range: Range) -> np.ndarray:
    """Look up the RGB colour of every value. Returns an ``(..., 3)`` uint8 array."""
    return np.asarray(table)[table_index(values, value_range, len(table))]
