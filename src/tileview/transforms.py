"""Scalar transforms applied to decoded samples before rendering.

A transform is any ``float -> float`` callable. Callables marked with
:func:`array_transform` are applied to whole grids at once; anything else is
applied element by element.
"""
import numpy as np

from .errors import ConfigurationError


def array_transform(func):
    """Mark ``func`` as safe to call with a numpy array."""
    func.accepts_arrays = True
    return func


@array_transform
def identity(x):
    return x


@array_transform
def kelvin_to_celsius(x):
    return x - 273.15


@array_transform
def pa_to_hpa(x):
    return x / 100.0


@array_transform
def negate(x):
    return -x


@array_transform
def absolute(x):
    return np.abs(x)


@array_transform
def log10(x):
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.log10(x)


TRANSFORMS = {
    "identity": identity,
    "kelvin_to_celsius": kelvin_to_celsius,
    "pa_to_hpa": pa_to_hpa,
    "negate": negate,
    "abs": absolute,
    "log10": log10,
}


def get(name):
    """Return the transform registered as ``name``."""
    try:
        return TRANSFORMS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown transform '{name}', expected one of {sorted(TRANSFORMS)}") from None


def apply(transform, samples):
    """Apply ``transform`` to every sample, returning a float64 array."""
    samples = np.asarray(samples, dtype=np.float64)
    if transform is None:
        return samples
    if getattr(transform, "accepts_arrays", False):
        return np.asarray(transform(samples), dtype=np.float64)
    return np.vectorize(transform, otypes=[np.float64])(samples)
