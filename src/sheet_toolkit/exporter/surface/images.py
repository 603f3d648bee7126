"""
Module: exporter.surface.images

Purpose:
    Load and cache every image a block tree references, with bounded
    waits. An image that fails or times out still "settles" (as None) so
    measurement is never blocked indefinitely.

Key Classes:
    - ImageLoader: Per-export image cache
    - SettleReport: Which URLs loaded, failed or timed out

Supported references:
    - http(s):// URLs (fetched with requests, streamed under a deadline)
    - data: URIs (base64)
    - file:// URLs and plain filesystem paths

Dependencies:
    - requests: HTTP fetching
    - PIL: Decoding

Used By:
    - exporter.surface.pillow_surface: Draws cached images
    - exporter.layout.measurer: Settles images before measuring
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional
from urllib.parse import unquote, urlparse

import requests
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ImageTimeout(Exception):
    """A single image exceeded its wait budget."""
    pass


@dataclass
class SettleReport:
    """Outcome of settling a set of image references."""

    loaded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)

    @property
    def settled_count(self) -> int:
        return len(self.loaded) + len(self.failed) + len(self.timed_out)


class ImageLoader:
    """
    Loads images once per export call and hands out decoded copies.

    Attributes:
        timeout_s: Max seconds for one image
        settle_timeout_s: Max seconds for one ``settle()`` call

    Example:
        >>> loader = ImageLoader(timeout_s=5, settle_timeout_s=20)
        >>> report = loader.settle(["https://example.com/a.png"])
        >>> loader.get("https://example.com/a.png")  # Image or None
    """

    def __init__(
        self,
        *,
        timeout_s: float = 10.0,
        settle_timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.settle_timeout_s = settle_timeout_s
        self._session = session
        self._owns_session = session is None
        self._cache: Dict[str, Optional[Image.Image]] = {}
        self._timed_out: set[str] = set()

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    def settle(self, urls: Iterable[str]) -> SettleReport:
        """
        Load every not-yet-cached reference, within the settle budget.

        References left when the budget runs out are marked timed out
        without being attempted.
        """
        report = SettleReport()
        deadline = time.monotonic() + self.settle_timeout_s

        for url in dict.fromkeys(urls):
            if url in self._cache:
                self._record(report, url)
                continue

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"Image settle budget exhausted, skipping {_short(url)}")
                self._cache[url] = None
                self._timed_out.add(url)
                report.timed_out.append(url)
                continue

            try:
                self._cache[url] = self._load(url, min(self.timeout_s, remaining))
                report.loaded.append(url)
            except ImageTimeout:
                logger.warning(f"Image timed out after {self.timeout_s:.1f}s: {_short(url)}")
                self._cache[url] = None
                self._timed_out.add(url)
                report.timed_out.append(url)
            except (OSError, ValueError, requests.RequestException, UnidentifiedImageError) as e:
                logger.warning(f"Image failed to load, drawing placeholder: {_short(url)} ({e})")
                self._cache[url] = None
                report.failed.append(url)

        logger.debug(
            f"Settled {report.settled_count} images: {len(report.loaded)} loaded, "
            f"{len(report.failed)} failed, {len(report.timed_out)} timed out"
        )
        return report

    def get(self, url: str) -> Optional[Image.Image]:
        """Decoded image for a settled reference (None if it failed)."""
        return self._cache.get(url)

    def is_settled(self, url: str) -> bool:
        return url in self._cache

    def close(self) -> None:
        """Release decoded images and the HTTP session."""
        for img in self._cache.values():
            if img is not None:
                img.close()
        self._cache.clear()
        self._timed_out.clear()
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    # ─────────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────────

    def _record(self, report: SettleReport, url: str) -> None:
        if url in self._timed_out:
            report.timed_out.append(url)
        elif self._cache[url] is None:
            report.failed.append(url)
        else:
            report.loaded.append(url)

    def _load(self, url: str, timeout_s: float) -> Image.Image:
        scheme = urlparse(url).scheme.lower()
        if scheme in ("http", "https"):
            data = self._fetch(url, timeout_s)
        elif scheme == "data":
            data = _decode_data_uri(url)
        elif scheme == "file":
            data = Path(unquote(urlparse(url).path)).read_bytes()
        else:
            data = Path(url).read_bytes()
        return _decode(data)

    def _fetch(self, url: str, timeout_s: float) -> bytes:
        """Stream an HTTP image, enforcing a wall-clock deadline."""
        if self._session is None:
            self._session = requests.Session()
        start = time.monotonic()
        try:
            with self._session.get(url, timeout=timeout_s, stream=True) as response:
                response.raise_for_status()
                buf = io.BytesIO()
                for chunk in response.iter_content(CHUNK_SIZE):
                    buf.write(chunk)
                    if time.monotonic() - start > timeout_s:
                        raise ImageTimeout(url)
                return buf.getvalue()
        except requests.Timeout as e:
            raise ImageTimeout(url) from e


def _decode(data: bytes) -> Image.Image:
    """Decode bytes into a fully loaded RGBA image."""
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        return img.convert("RGBA")


def _decode_data_uri(uri: str) -> bytes:
    header, _, payload = uri.partition(",")
    if not payload:
        raise ValueError("Empty data URI")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 data URI: {e}") from e
    return unquote(payload).encode("latin-1")


def _short(url: str, limit: int = 80) -> str:
    """Shorten long references (data URIs) for log lines."""
    return url if len(url) <= limit else url[:limit] + "..."
