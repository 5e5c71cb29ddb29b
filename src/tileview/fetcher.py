"""Fetch numerical data tiles and decode them into sample grids.

All tiles of one request are fetched concurrently with an
``httpx.AsyncClient`` and joined with ``asyncio.gather``. A failure of any
tile fails the whole batch; no partial results are returned.
"""
import asyncio
import io
import logging
from typing import List, Optional, Sequence, Tuple

import httpx
import numpy as np
from PIL import Image, UnidentifiedImageError

from . import config
from .codec import decode_rgba
from .errors import TileFetchError
from .ranges import Range

logger = logging.getLogger(__name__)


def tile_url(base: str, fixed: str, z: int, x: int, y: int) -> str:
    """Build the URL of one tile: ``{base}/{fixed}/{z}/{x}/{y}.png``."""
    base = base.rstrip("/")
    if fixed:
        return f"{base}/{fixed}/{z}/{x}/{y}.png"
    return f"{base}/{z}/{x}/{y}.png"


def relay_url(url: str, relay: Optional[str] = None) -> str:
    """Route ``url`` through the cross-origin relay.

    Parameters
    ----------
    url : str
        Original tile URL.
    relay : str, optional
        Relay prefix. If None, the configured ``relay_url`` is used. An
        empty relay returns ``url`` unchanged.
    """
    relay = config.relay_url() if relay is None else relay
    if not relay:
        return url
    return f"{relay}?path={url}"


def _to_pixels(content: bytes, size: Tuple[int, int]) -> np.ndarray:
    """Load a PNG payload into an RGBA buffer of exactly ``size``.

    The image is placed at the origin; larger images are cropped and
    smaller ones padded with zero bytes (which decode to no-data).
    """
    with Image.open(io.BytesIO(content)) as img:
        img = img.convert("RGBA")
        if img.size != tuple(size):
            canvas = Image.new("RGBA", tuple(size), (0, 0, 0, 0))
            canvas.paste(img, (0, 0))
            img = canvas
        return np.array(img, dtype=np.uint8)


class TileFetcher:
    """Concurrent fetcher for numerical data tiles.

    Parameters
    ----------
    relay : str, optional
        Relay prefix, see :func:`relay_url`. Defaults to the configured one.
    timeout : float, optional
        Per-request timeout in seconds. Defaults to ``request_timeout``.
    transport : httpx.AsyncBaseTransport, optional
        Transport handed to the client, mainly for testing.
    """

    def __init__(self, relay: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.relay = relay
        self.timeout = httpx.Timeout(config.request_timeout() if timeout is None else timeout)
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport,
                                 follow_redirects=True)

    async def _fetch_one(self, client: httpx.AsyncClient, url: str,
                         size: Tuple[int, int]) -> np.ndarray:
        target = relay_url(url, self.relay)
        try:
            response = await client.get(target)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Tile request failed with status %s: %s",
                           exc.response.status_code, url)
            raise TileFetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            logger.warning("Tile request error for %s: %s", url, exc)
            raise TileFetchError(url, str(exc) or type(exc).__name__) from exc
        try:
            return _to_pixels(response.content, size)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            content_type = response.headers.get("Content-Type", "unknown")
            raise TileFetchError(url, f"undecodable payload ({content_type})") from exc

    async def fetch_pixels(self, urls: Sequence[str], size: Tuple[int, int]) -> List[np.ndarray]:
        """Fetch every tile into an RGBA buffer of ``size`` (width, height)."""
        if not urls:
            return []
        logger.debug("Fetching %d tile(s) of size %s", len(urls), size)
        async with self._client() as client:
            tasks = [asyncio.ensure_future(self._fetch_one(client, url, size)) for url in urls]
            try:
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

    async def fetch(self, urls: Sequence[str], size: Tuple[int, int]) -> List[np.ndarray]:
        """Fetch tiles and decode each one into a sample grid.

        Parameters
        ----------
        urls : sequence of str
            Tile URLs, all with the same geometry.
        size : tuple of int
            (width, height) of the grids.

        Returns
        -------
        list of numpy.ndarray
            One row-major float32 grid of length width*height per URL.

        Raises
        ------
        TileFetchError
            If any of the requests fails.
        """
        pixels = await self.fetch_pixels(urls, size)
        return [decode_rgba(rgba) for rgba in pixels]

    async def fetch_and_accumulate(self, urls: Sequence[str], size: Tuple[int, int],
                                   value_range: Optional[Range] = None
                                   ) -> Tuple[List[np.ndarray], Optional[Range]]:
        """Fetch and decode tiles, widening ``value_range`` with every grid.

        If ``value_range`` is None no accumulation takes place and None is
        returned in its place.

        Returns
        -------
        tuple
            (grids, range) where range is the accumulated copy.
        """
        grids = []
        for rgba in await self.fetch_pixels(urls, size):
            grid = decode_rgba(rgba)
            if value_range is not None:
                value_range = value_range.accumulate(grid)
            grids.append(grid)
        return grids, value_range
