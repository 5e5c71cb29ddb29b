"""Configuration records of the three diagram variants.

Each layer owns one config for its lifetime. Configs are mutated in place
when the user changes a parameter (colour table, threshold count, glyph
spacing); the value range is replaced as a whole when it tightens.
"""
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from ..errors import ConfigurationError
from ..ranges import Range
from ..transforms import identity

TONE = "tone"
CONTOUR = "contour"
VECTOR = "vector"
KINDS = (TONE, CONTOUR, VECTOR)

Transform = Callable[[float], float]


def _init_range(cfg, value_range):
    if value_range is None:
        value_range = Range.unresolved()
    elif not isinstance(value_range, Range):
        try:
            value_range = Range.from_minmax(value_range)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value range {value_range!r}: {exc}") from exc
    cfg.value_range = value_range
    cfg.range_fixed = value_range.is_resolved


@dataclass
class ToneConfig:
    """Colour-mapped raster.

    Attributes
    ----------
    color_index : int
        Id of the colour table, see :func:`tileview.colormaps.lookup`.
    transform : callable
        Applied to every decoded sample before colour lookup.
    value_range : Range
        Normalisation range. Unresolved ranges are computed from the data.
    range_fixed : bool
        True when the caller supplied the range; it is then never updated.
    """

    color_index: int = 0
    transform: Transform = identity
    value_range: Optional[Range] = None
    range_fixed: bool = field(default=False, init=False)

    kind = TONE

    def __post_init__(self):
        _init_range(self, self.value_range)


@dataclass
class ContourConfig:
    """Isolines at ``threshold_count`` evenly spaced levels across the range."""

    threshold_count: int = 10
    transform: Transform = identity
    value_range: Optional[Range] = None
    color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    line_width: float = 1.5
    range_fixed: bool = field(default=False, init=False)

    kind = CONTOUR

    def __post_init__(self):
        validate_threshold_count(self.threshold_count)
        _init_range(self, self.value_range)


@dataclass
class VectorConfig:
    """Direction/magnitude glyphs placed every ``spacing`` pixels.

    The first two grids of a draw call are the x (u) and y (v) components.
    """

    spacing: Tuple[int, int] = (16, 16)
    transform: Transform = identity
    color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    line_width: float = 1.0

    kind = VECTOR

    def __post_init__(self):
        self.spacing = validate_spacing(self.spacing)


def validate_threshold_count(count):
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise ConfigurationError(f"Threshold count must be a positive integer, got {count!r}")
    return count


def validate_spacing(spacing):
    if isinstance(spacing, dict):
        spacing = (spacing.get("x"), spacing.get("y"))
    try:
        sx, sy = (int(s) for s in spacing)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Vector spacing must be an (x, y) pair, got {spacing!r}") from None
    if sx <= 0 or sy <= 0:
        raise ConfigurationError(f"Vector spacing must be positive, got {spacing!r}")
    return (sx, sy)
