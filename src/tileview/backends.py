"""Selection between the three map-engine backends.

The viewer can show tiles on a flat XY plane, on a 3D sphere, or on a
projected map. Code that differs per backend asks a :class:`LibIdentifier`
to pick one of three alternatives; the identifier is resolved once when the
owning controller is built.
"""
from enum import Enum


class Backend(str, Enum):
    """Identifiers for the supported map-engine backends."""

    XY = "XY"
    SPHERE = "3d Sphere"
    PROJECTIONS = "Projections"

    @classmethod
    def from_projection_code(cls, code) -> "Backend":
        """Map a projection code to its backend.

        ``"XY"`` and ``"3d Sphere"`` select their own backend, every other
        projection code is drawn by the projections backend.
        """
        if isinstance(code, Backend):
            return code
        if code == cls.XY.value:
            return cls.XY
        if code == cls.SPHERE.value:
            return cls.SPHERE
        return cls.PROJECTIONS


class LibIdentifier:
    """Pick the alternative that matches a backend.

    Parameters
    ----------
    backend : Backend or str
        Backend, or a projection code understood by
        :meth:`Backend.from_projection_code`.
    """

    def __init__(self, backend):
        self.backend = Backend.from_projection_code(backend)
        self._index = _ORDER.index(self.backend)

    def select(self, xy, sphere, projection):
        """Return the argument belonging to this identifier's backend."""
        return (xy, sphere, projection)[self._index]

    def __repr__(self):
        return f"LibIdentifier({self.backend.value!r})"


_ORDER = (Backend.XY, Backend.SPHERE, Backend.PROJECTIONS)
