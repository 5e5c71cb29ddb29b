"""Value range bookkeeping for diagram scaling.

A range starts either *unresolved* (``min=+inf, max=-inf``, meaning "compute
from the data") or *fixed* by the caller. Accumulation returns a new range
instead of mutating in place; the diagram owning the range decides whether
to keep it.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .codec import nodata_mask


@dataclass(frozen=True)
class Range:
    """Closed ``[min, max]`` interval used to normalise samples.

    Attributes
    ----------
    min : float
        Lower bound, ``+inf`` while unresolved.
    max : float
        Upper bound, ``-inf`` while unresolved.
    """

    min: float = math.inf
    max: float = -math.inf

    @classmethod
    def unresolved(cls) -> "Range":
        return cls(math.inf, -math.inf)

    @classmethod
    def fixed(cls, lo: float, hi: float) -> "Range":
        """Create a caller-supplied range.

        Raises
        ------
        ValueError
            If a bound is not finite or ``lo > hi``.
        """
        lo, hi = float(lo), float(hi)
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise ValueError(f"Fixed range bounds must be finite, got ({lo}, {hi})")
        if lo > hi:
            raise ValueError(f"Range minimum {lo} is larger than maximum {hi}")
        return cls(lo, hi)

    @classmethod
    def from_minmax(cls, minmax: Optional[Tuple[float, float]]) -> "Range":
        """Build a range from an optional ``(min, max)`` pair.

        ``None`` and ``(0, 0)`` both mean the range should be computed from
        the data.
        """
        if minmax is None:
            return cls.unresolved()
        lo, hi = minmax
        if lo == 0 and hi == 0:
            return cls.unresolved()
        return cls.fixed(lo, hi)

    @property
    def is_resolved(self) -> bool:
        return math.isfinite(self.min)

    @property
    def is_degenerate(self) -> bool:
        """True when the range cannot be used to normalise values."""
        return not (math.isfinite(self.min) and math.isfinite(self.max)) or self.max <= self.min

    @property
    def span(self) -> float:
        return self.max - self.min

    def as_tuple(self) -> Tuple[float, float]:
        return (self.min, self.max)

    def accumulate(self, samples: np.ndarray) -> "Range":
        """Widen the range to include every valid sample.

        No-data sentinels and non-finite samples are ignored. The result is
        never narrower than ``self``.

        Parameters
        ----------
        samples : numpy.ndarray
            Decoded samples of one tile.

        Returns
        -------
        Range
            The widened range (``self`` if no valid sample was seen).
        """
        # The 0.0 sentinel is a decoded sample too, but it never widens the range
        samples = np.asarray(samples)
        valid = samples[~nodata_mask(samples)]
        if valid.size == 0:
            return self
        lo = min(self.min, float(valid.min()))
        hi = max(self.max, float(valid.max()))
        if lo == self.min and hi == self.max:
            return self
        return Range(lo, hi)

    def union(self, other: "Range") -> "Range":
        """Smallest range containing both ``self`` and ``other``."""
        return Range(min(self.min, other.min), max(self.max, other.max))

    def __iter__(self):
        return iter(self.as_tuple())
