"""Raster surface that diagrams paint onto.

A thin wrapper around a Pillow RGBA image: per-pixel writes go through
numpy, vector strokes through ``ImageDraw``.
"""
import io
import math
from pathlib import Path
from typing import Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

TRANSPARENT = (0, 0, 0, 0)


class RenderSurface:
    """Fixed-size RGBA pixel buffer.

    Parameters
    ----------
    width : int
        Width in pixels.
    height : int
        Height in pixels.
    background : tuple of int, optional
        Initial RGBA colour, by default fully transparent.
    """

    def __init__(self, width: int, height: int, background=TRANSPARENT):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.image = Image.new("RGBA", (self.width, self.height), tuple(background))
        self._draw = ImageDraw.Draw(self.image)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def clear(self, color=TRANSPARENT):
        self._draw.rectangle((0, 0, self.width, self.height), fill=tuple(color))

    def put_pixels(self, rgba: np.ndarray):
        """Replace every pixel.

        Parameters
        ----------
        rgba : numpy.ndarray
            uint8 array of shape (height, width, 4) or (height*width, 4).
        """
        rgba = np.asarray(rgba, dtype=np.uint8).reshape(self.height, self.width, 4)
        self.image.paste(Image.fromarray(rgba, mode="RGBA"), (0, 0))

    def set_pixel(self, x: int, y: int, rgba):
        self.image.putpixel((int(x), int(y)), tuple(int(c) for c in rgba))

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        return self.image.getpixel((int(x), int(y)))

    def stroke(self, points: Sequence, width: float = 1.0, color=(0, 0, 0, 255)):
        """Stroke a polyline.

        Pillow only draws integer line widths, so fractional widths are
        rounded up.

        Parameters
        ----------
        points : sequence
            (x, y) vertices in pixel coordinates, at least two.
        width : float, optional
            Line width in pixels.
        color : tuple of int, optional
            RGBA stroke colour.
        """
        xy = [(float(x), float(y)) for x, y in points]
        if len(xy) < 2:
            return
        self._draw.line(xy, fill=tuple(color), width=max(1, math.ceil(width)))

    def fade(self, opacity: float):
        """Multiply the alpha channel of every pixel by ``opacity``."""
        if opacity >= 1.0:
            return
        alpha = self.image.getchannel("A").point(lambda a: int(round(a * opacity)))
        self.image.putalpha(alpha)

    def pixels(self) -> np.ndarray:
        """Return a (height, width, 4) copy of the pixel buffer."""
        return np.array(self.image, dtype=np.uint8)

    def to_image(self) -> Image.Image:
        return self.image.copy()

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        try:
            self.image.save(buf, format="PNG")
            return buf.getvalue()
        finally:
            buf.close()

    def save(self, path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.image.save(path, format="PNG")
        return path
