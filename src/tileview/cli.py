"""Command-line interface for tileview.

Render numerical data tiles to PNG files, resolve value ranges and manage
layer configuration files using the Typer framework.
"""
import asyncio
import pathlib
from typing import List, Optional

import typer
from tqdm import tqdm

from . import colormaps, config, layer_config, utils
from .diagrams import CONTOUR, KINDS, TONE
from .errors import TileViewError
from .fetcher import TileFetcher, tile_url
from .layers import make_diagram
from .surface import RenderSurface
from .utils import vprint

app = typer.Typer()


def _use_env(env):
    if env != "DEFAULT":
        config.change_env(env)
    vprint(f"Environment: {env}")


def _fail(exc):
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _prop_for(kind, color_index, thresholds, spacing):
    if kind == TONE:
        return color_index
    if kind == CONTOUR:
        return thresholds
    return (spacing, spacing)


@app.callback()
def callback(verbose: bool = typer.Option(False, "--verbose", "-v",
                                          help="Print progress messages.")):
    """Render numerical data tiles as tone, contour and vector diagrams."""
    utils.set_verbose(verbose)


@app.command()
def render(
    urls: List[str] = typer.Argument(..., help="Tile base URLs, one per band."),
    out: pathlib.Path = typer.Option(pathlib.Path("tile.png"), "--out", "-o"),
    kind: str = typer.Option(TONE, "--kind", "-k", help=f"One of {', '.join(KINDS)}."),
    fixed: str = typer.Option("", "--fixed", help="Fixed dimension path segment."),
    z: int = typer.Option(0, "--z"),
    x: int = typer.Option(0, "--x"),
    y: int = typer.Option(0, "--y"),
    transform: str = typer.Option("identity", "--transform"),
    color_index: int = typer.Option(0, "--color-index"),
    thresholds: int = typer.Option(10, "--thresholds"),
    spacing: int = typer.Option(16, "--spacing"),
    vmin: Optional[float] = typer.Option(None, "--vmin"),
    vmax: Optional[float] = typer.Option(None, "--vmax"),
    size: Optional[int] = typer.Option(None, "--size", help="Tile size in pixels."),
    relay: Optional[str] = typer.Option(None, "--relay", help="Relay prefix, '' disables it."),
    env: str = typer.Option("DEFAULT", "--env"),
):
    """Render one tile to a PNG file."""
    _use_env(env)
    width, height = (size, size) if size else config.tile_size_pair()
    minmax = None if vmin is None or vmax is None else (vmin, vmax)
    try:
        diagram = make_diagram(kind, transform, minmax,
                               _prop_for(kind, color_index, thresholds, spacing),
                               TileFetcher(relay=relay))
        tile_urls = [tile_url(url, fixed, z, x, y) for url in urls]
        vprint(f"Rendering {kind} diagram from {len(tile_urls)} tile(s)")
        surface = asyncio.run(diagram.draw(tile_urls, RenderSurface(width, height)))
    except TileViewError as exc:
        _fail(exc)
    surface.save(out)
    typer.echo(f"Wrote {out}")


@app.command()
def minmax(
    urls: List[str] = typer.Argument(..., help="Tile base URLs, one per band."),
    fixed: str = typer.Option("", "--fixed"),
    z: int = typer.Option(0, "--z"),
    x: int = typer.Option(0, "--x"),
    y: int = typer.Option(0, "--y"),
    size: Optional[int] = typer.Option(None, "--size"),
    relay: Optional[str] = typer.Option(None, "--relay"),
    env: str = typer.Option("DEFAULT", "--env"),
):
    """Resolve the value range of a set of tiles."""
    _use_env(env)
    size_pair = (size, size) if size else config.tile_size_pair()
    try:
        diagram = make_diagram(TONE, fetcher=TileFetcher(relay=relay))
        tile_urls = [tile_url(url, fixed, z, x, y) for url in urls]
        lo, hi = asyncio.run(diagram.calc_min_max(tile_urls, size_pair))
    except TileViewError as exc:
        _fail(exc)
    typer.echo(f"min={lo} max={hi}")


async def _render_layers(layer_file, zoom, out_dir):
    controller = await layer_config.build(layer_file)
    written = 0
    for layer in controller.get():
        if not layer.show:
            vprint(f"Skipping hidden layer '{layer.name}'")
            continue
        if not layer.zoom_levels[0] <= zoom <= layer.zoom_levels[1]:
            vprint(f"Skipping layer '{layer.name}', zoom {zoom} not served")
            continue
        tiles = layer.tiles(zoom)
        for z, x, y in tqdm(tiles, desc=layer.name, unit="tile", disable=not utils.VERBOSE):
            surface = await layer.render_tile(z, x, y)
            surface.save(out_dir / layer.name / str(z) / str(x) / f"{y}.png")
            written += 1
    return written


@app.command("render-layers")
def render_layers(
    config_file: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False),
    zoom: int = typer.Option(0, "--zoom"),
    out_dir: pathlib.Path = typer.Option(pathlib.Path("tiles"), "--out-dir"),
    env: str = typer.Option("DEFAULT", "--env"),
):
    """Render every layer of a configuration file at one zoom level."""
    _use_env(env)
    try:
        layer_file = layer_config.read(config_file)
        written = asyncio.run(_render_layers(layer_file, zoom, out_dir))
    except TileViewError as exc:
        _fail(exc)
    typer.echo(f"Wrote {written} tile(s) to {out_dir}")


@app.command("init-config")
def init_config(
    root_url: Optional[str] = typer.Option(None, "--root-url"),
    backend: Optional[str] = typer.Option(None, "--backend"),
    directory: pathlib.Path = typer.Option(pathlib.Path("."), "--dir"),
):
    """Write a starter layer_config.json."""
    path = layer_config.generate_file(root_url=root_url, config_file_path=directory,
                                      backend=backend)
    typer.echo(f"Wrote {path}")


@app.command("colormaps")
def list_colormaps():
    """List the registered colour tables."""
    for idx, name in colormaps.names():
        typer.echo(f"{idx:3d}  {name}")
