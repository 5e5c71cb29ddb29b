"""Helpers for checking sample grids against the target surface."""
import numpy as np

from ..errors import InsufficientGridsError


def grid_for_surface(grids, index, surface) -> np.ndarray:
    """Return grid ``index`` after checking it covers ``surface`` exactly."""
    if len(grids) <= index:
        raise InsufficientGridsError(
            f"Diagram needs at least {index + 1} sample grid(s), got {len(grids)}")
    grid = np.asarray(grids[index]).reshape(-1)
    expected = surface.width * surface.height
    if grid.size != expected:
        raise ValueError(
            f"Sample grid has {grid.size} values, surface {surface.width}x{surface.height} "
            f"needs {expected}")
    return grid
