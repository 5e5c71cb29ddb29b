"""tileview: render numerical data tiles.

Slippy-map PNG tiles whose pixels carry float32 samples are fetched,
decoded and drawn as tone (colour-mapped), contour or vector diagrams.
"""

from . import codec, colormaps, config
from .backends import Backend, LibIdentifier
from .diagrams import ContourConfig, Diagram, ToneConfig, VectorConfig, render
from .errors import (ConfigurationError, NotApplicableError, TileFetchError,
                     TileViewError)
from .fetcher import TileFetcher, tile_url
from .layers import Layer, LayerController, make_diagram
from .ranges import Range
from .surface import RenderSurface

__version__ = "0.1.0"
