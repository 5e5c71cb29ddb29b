"""Layer definitions stored as JSON.

A layer configuration file looks like::

    {
      "root_url": "https://example.com/tiles",
      "backend": "XY",
      "layers": [
        {"name": "Temperature", "type": "tone", "urls": ["t2m"],
         "fixed": "surface", "tile_size": [256, 256],
         "zoom": {"min": 0, "max": 4}, "transform": "kelvin_to_celsius",
         "color_index": 0, "minmax": null}
      ]
    }

Tone layers take ``color_index``, contour layers ``threshold_count`` and
vector layers ``spacing`` (``{"x": .., "y": ..}``).
"""
import json
import logging
import pathlib
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from jinja2 import Template

from . import config
from .backends import Backend
from .diagrams import CONTOUR, KINDS, TONE, VECTOR
from .errors import LayerConfigError
from .layers import LayerController

logger = logging.getLogger(__name__)

_PROP_KEYS = {TONE: "color_index", CONTOUR: "threshold_count", VECTOR: "spacing"}


@dataclass
class LayerSpec:
    """Definition of one layer as read from a configuration file."""

    name: str
    kind: str
    urls: List[str]
    fixed: str = ""
    tile_size: Tuple[int, int] = (256, 256)
    zoom_levels: Tuple[int, int] = (0, 0)
    transform: str = "identity"
    show: bool = True
    opacity: float = 1.0
    minmax: Optional[Tuple[float, float]] = None
    prop: object = None


@dataclass
class LayerFile:
    root_url: str
    backend: Backend
    layers: List[LayerSpec] = field(default_factory=list)


def _parse_layer(entry, position) -> LayerSpec:
    where = f"layer {position}"
    if not isinstance(entry, dict):
        raise LayerConfigError(f"{where}: expected an object")
    try:
        name = entry["name"]
        kind = entry["type"]
        urls = entry["urls"]
    except KeyError as exc:
        raise LayerConfigError(f"{where}: missing key {exc}") from None
    where = f"layer '{name}'"
    if kind not in KINDS:
        raise LayerConfigError(f"{where}: unknown type '{kind}', expected one of {KINDS}")
    if isinstance(urls, str):
        urls = [urls]
    if not urls:
        raise LayerConfigError(f"{where}: needs at least one url")

    prop_key = _PROP_KEYS[kind]
    for other in set(_PROP_KEYS.values()) - {prop_key}:
        if other in entry:
            raise LayerConfigError(f"{where}: '{other}' does not apply to a {kind} layer")
    prop = entry.get(prop_key)
    if kind == VECTOR and isinstance(prop, dict):
        prop = (prop.get("x"), prop.get("y"))

    zoom = entry.get("zoom") or {}
    minmax = entry.get("minmax")
    try:
        return LayerSpec(
            name=name, kind=kind, urls=list(urls),
            fixed=str(entry.get("fixed", "")),
            tile_size=tuple(int(s) for s in entry.get("tile_size", config.tile_size_pair())),
            zoom_levels=(int(zoom.get("min", 0)), int(zoom.get("max", 0))),
            transform=entry.get("transform", "identity"),
            show=bool(entry.get("show", True)),
            opacity=float(entry.get("opacity", 1.0)),
            minmax=None if minmax is None else (float(minmax[0]), float(minmax[1])),
            prop=prop,
        )
    except (AttributeError, TypeError, ValueError, IndexError) as exc:
        raise LayerConfigError(f"{where}: {exc}") from exc


def read(json_file_path) -> LayerFile:
    """Read a layer configuration file.

    Parameters
    ----------
    json_file_path : str or pathlib.Path
        Path to the JSON file.

    Returns
    -------
    LayerFile
        Root URL, backend and layer specs.

    Raises
    ------
    LayerConfigError
        If the file is not valid JSON or a layer is malformed.
    """
    with open(json_file_path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise LayerConfigError(f"{json_file_path}: {exc}") from exc
    root_url = data.get("root_url") or config.settings.get("root_url")
    if not root_url:
        raise LayerConfigError(f"{json_file_path}: no root_url given")
    backend = Backend.from_projection_code(
        data.get("backend", config.settings.get("backend", config.DEFAULT_BACKEND)))
    layers = [_parse_layer(entry, idx) for idx, entry in enumerate(data.get("layers", []))]
    logger.debug("Read %d layer(s) from %s", len(layers), json_file_path)
    return LayerFile(root_url=root_url, backend=backend, layers=layers)


async def build(layer_file: LayerFile, controller: Optional[LayerController] = None):
    """Create and register every layer of ``layer_file``.

    Returns
    -------
    LayerController
        The controller holding the new layers.
    """
    controller = controller or LayerController(layer_file.root_url, layer_file.backend)
    for spec in layer_file.layers:
        layer = await controller.create(
            spec.kind, spec.name, spec.urls, spec.fixed,
            tile_size=spec.tile_size, zoom_levels=spec.zoom_levels,
            transform=spec.transform, show=spec.show, opacity=spec.opacity,
            minmax=spec.minmax, prop=spec.prop)
        controller.add(layer)
    return controller


def generate_file(root_url=None, config_file_path="./", backend=None):
    """Write a starter ``layer_config.json``.

    Parameters
    ----------
    root_url : str, optional
        Root URL of the tile server. Defaults to the ``root_url`` setting.
    config_file_path : str, optional
        Directory where the file is written, by default "./".
    backend : str, optional
        Backend name, defaults to the ``backend`` setting.

    Returns
    -------
    pathlib.Path
        Path of the written file.
    """
    root_url = root_url or config.settings.get("root_url", "https://example.com/tiles")
    backend = Backend.from_projection_code(
        backend or config.settings.get("backend", config.DEFAULT_BACKEND))
    tile_size = list(config.tile_size_pair())

    layers = [
        {
            "name": "Temperature",
            "type": TONE,
            "urls": ["t2m"],
            "fixed": "surface",
            "transform": "kelvin_to_celsius",
            "color_index": 0,
            "minmax": [-40, 40],
        },
        {
            "name": "Pressure",
            "type": CONTOUR,
            "urls": ["msl"],
            "fixed": "surface",
            "transform": "pa_to_hpa",
            "threshold_count": 20,
            "minmax": [950, 1050],
        },
        {
            "name": "Wind",
            "type": VECTOR,
            "urls": ["u10", "v10"],
            "fixed": "surface",
            "spacing": {"x": 16, "y": 16},
        },
    ]
    common_settings = {
        "tile_size": tile_size,
        "zoom": {"min": 0, "max": 4},
        "show": True,
        "opacity": 1.0,
    }
    layers = [{**layer, **common_settings} for layer in layers]

    template_str = """
{
  "root_url": "{{ root_url }}",
  "backend": "{{ backend }}",
  "layers": {{ layers | tojson(indent=4) }}
}"""

    template = Template(template_str)
    rendered = template.render(root_url=root_url, backend=backend.value, layers=layers)

    output_path = pathlib.Path(config_file_path) / "layer_config.json"
    with open(output_path, "w") as fp:
        fp.write(rendered)
    return output_path
