"""Diagram variants that turn decoded sample grids into images.

Three variants are supported: tone (colour-mapped raster), contour
(isolines) and vector (direction glyphs). Each is described by a config
record and rendered through :func:`render`.
"""

from .configs import CONTOUR, KINDS, TONE, VECTOR, ContourConfig, ToneConfig, VectorConfig
from .contour import thresholds
from .diagram import Diagram, render

__all__ = [
    "TONE", "CONTOUR", "VECTOR", "KINDS",
    "ToneConfig", "ContourConfig", "VectorConfig",
    "Diagram", "render", "thresholds",
]
