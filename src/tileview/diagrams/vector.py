"""Vector diagram: arrow glyphs showing field direction and magnitude.

Glyphs sit at the centre of every ``spacing`` cell. The arrow length is
the local magnitude relative to the largest magnitude among the sampled
nodes, scaled to the smaller spacing. Image rows grow downwards, so the
y (v) component is flipped when drawing.
"""
import math

import numpy as np

from .. import transforms
from ..codec import nodata_mask
from .configs import VectorConfig
from .grids import grid_for_surface

HEAD_ANGLE = math.radians(150)
HEAD_FRACTION = 0.3
LENGTH_FRACTION = 0.9


def glyph_nodes(width, height, spacing):
    """Pixel (x, y) positions of the glyph grid."""
    sx, sy = spacing
    xs = np.arange(sx // 2, width, sx)
    ys = np.arange(sy // 2, height, sy)
    return [(int(x), int(y)) for y in ys for x in xs]


def arrow(x, y, u, v, length):
    """Polylines of one arrow centred on (x, y) pointing along (u, -v)."""
    angle = math.atan2(-v, u)
    dx = math.cos(angle) * length / 2.0
    dy = math.sin(angle) * length / 2.0
    tail = (x + 0.5 - dx, y + 0.5 - dy)
    tip = (x + 0.5 + dx, y + 0.5 + dy)
    head = length * HEAD_FRACTION
    barbs = [
        (tip[0] + math.cos(angle + sign * HEAD_ANGLE) * head,
         tip[1] + math.sin(angle + sign * HEAD_ANGLE) * head)
        for sign in (1, -1)
    ]
    return [[tail, tip], [barbs[0], tip, barbs[1]]]


def render(config: VectorConfig, grids, surface):
    u_raw = grid_for_surface(grids, 0, surface)
    v_raw = grid_for_surface(grids, 1, surface)
    surface.clear()

    u = transforms.apply(config.transform, u_raw).reshape(surface.height, surface.width)
    v = transforms.apply(config.transform, v_raw).reshape(surface.height, surface.width)
    invalid = (nodata_mask(u_raw) | nodata_mask(v_raw)).reshape(u.shape)
    with np.errstate(over="ignore", invalid="ignore"):
        invalid |= ~np.isfinite(np.hypot(u, v))

    nodes = [(x, y) for x, y in glyph_nodes(surface.width, surface.height, config.spacing)
             if not invalid[y, x]]
    if not nodes:
        return surface
    magnitudes = [math.hypot(u[y, x], v[y, x]) for x, y in nodes]
    largest = max(magnitudes)
    if largest == 0:
        return surface

    scale = min(config.spacing) * LENGTH_FRACTION / largest
    for (x, y), magnitude in zip(nodes, magnitudes):
        if magnitude == 0:
            continue
        for line in arrow(x, y, u[y, x], v[y, x], magnitude * scale):
            surface.stroke(line, config.line_width, config.color)
    return surface
