"""Float32 sample encoding used by numerical data tiles.

Each tile pixel carries one float32 sample in its R, G and B channels: the
three bytes are the most significant bytes of the big-endian IEEE-754
representation of the value. The low byte is dropped and the alpha channel
carries no sample information (it is written as 255 and ignored on decode).

Decoding is a bit reinterpretation, not a scaling, so every 3-byte pattern
maps to a defined float (possibly NaN or +/-inf).
"""
from typing import Sequence

import numpy as np

NODATA = 0.0

_BE_UINT32 = np.dtype(">u4")
_BE_FLOAT32 = np.dtype(">f4")


def decode(pixel: Sequence[int]) -> float:
    """Decode a single ``(r, g, b[, a])`` pixel into its float32 sample.

    Parameters
    ----------
    pixel : sequence of int
        Channel values in the range 0-255. Only the first three are used.

    Returns
    -------
    float
        The float32 value whose top 24 bits are ``r, g, b``.
    """
    r, g, b = (int(c) & 0xFF for c in pixel[:3])
    word = np.array([(r << 24) | (g << 16) | (b << 8)], dtype=_BE_UINT32)
    return float(word.view(_BE_FLOAT32)[0])


def decode_rgba(rgba: np.ndarray) -> np.ndarray:
    """Decode an image buffer into a row-major sample grid.

    Parameters
    ----------
    rgba : numpy.ndarray
        uint8 array of shape (H, W, 3) or (H, W, 4).

    Returns
    -------
    numpy.ndarray
        1-D float32 array of length H*W.
    """
    rgba = np.asarray(rgba, dtype=np.uint8)
    if rgba.ndim != 3 or rgba.shape[2] < 3:
        raise ValueError(f"Expected an (H, W, 3|4) pixel buffer, got shape {rgba.shape}")
    height, width = rgba.shape[:2]
    words = np.zeros((height, width, 4), dtype=np.uint8)
    words[..., :3] = rgba[..., :3]
    samples = words.reshape(-1).view(_BE_FLOAT32)
    return samples.astype(np.float32)


def encode(value: float) -> tuple:
    """Encode a float into an ``(r, g, b, 255)`` pixel.

    The low byte of the float32 mantissa is dropped, so ``decode(encode(v))``
    returns ``v`` truncated to its 24 most significant bits.
    """
    raw = np.array([value], dtype=_BE_FLOAT32).view(np.uint8)
    return int(raw[0]), int(raw[1]), int(raw[2]), 255


def encode_array(values: np.ndarray) -> np.ndarray:
    """Encode a 2-D array of values into an (H, W, 4) uint8 RGBA buffer."""
    values = np.asarray(values)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2-D array of samples, got shape {values.shape}")
    raw = values.astype(_BE_FLOAT32).reshape(-1).view(np.uint8).reshape(values.shape + (4,))
    rgba = raw.copy()
    rgba[..., 3] = 255
    return rgba


def truncate(value: float) -> float:
    """Return ``value`` as it survives an encode/decode round trip."""
    return decode(encode(value))


def nodata_mask(samples: np.ndarray) -> np.ndarray:
    """Boolean mask of samples that are the no-data sentinel or non-finite."""
    samples = np.asarray(samples)
    return (samples == NODATA) | ~np.isfinite(samples)
