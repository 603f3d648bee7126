"""
Module: exporter.surface.base

Purpose:
    Abstract rendering surface. The measurer and rasterizer only need two
    host primitives: lay out a block tree at a given width and report
    every block's geometry, and draw a laid-out tree to one bitmap at a
    pixel ratio. Any binding (Pillow, headless browser, remote
    HTML-to-image service) that honors both can back an export.

Key Classes:
    - RenderSurface: Abstract base class with scoped attach/detach

Dependencies:
    - PIL: Raster type
    - exporter.surface.images: ImageLoader

Used By:
    - exporter.layout.measurer
    - exporter.controller: Scoped acquisition around one export
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Sequence

from PIL import Image

from sheet_toolkit.core.models import Block

from .images import ImageLoader

logger = logging.getLogger(__name__)


class RenderSurface(ABC):
    """
    Off-document layout surface owned by exactly one export call.

    Use as a context manager: the surface is attached on entry and
    always detached on exit, on success and failure alike.

    Attributes:
        images: Image cache shared by layout and rasterization
    """

    def __init__(self, images: ImageLoader) -> None:
        self.images = images
        self._attached = False

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        """Acquire host resources."""
        if self._attached:
            raise RuntimeError("Surface is already attached")
        self._attached = True
        logger.debug(f"Attached {type(self).__name__}")

    def detach(self) -> None:
        """Release host resources (idempotent)."""
        if not self._attached:
            return
        self._attached = False
        self.images.close()
        logger.debug(f"Detached {type(self).__name__}")

    def _require_attached(self) -> None:
        if not self._attached:
            raise RuntimeError(f"{type(self).__name__} is not attached")

    @abstractmethod
    def layout(self, blocks: Sequence[Block], width_px: int) -> List[Block]:
        """
        Lay out blocks top to bottom and return them measured.

        Args:
            blocks: Unmeasured blocks in document order
            width_px: Physical page width in CSS pixels

        Returns:
            Same blocks with top_px/height_px set

        Raises:
            RasterizationError: If the host cannot lay out the tree
        """

    @abstractmethod
    def rasterize(
        self,
        blocks: Sequence[Block],
        width_px: int,
        height_px: int,
        pixel_ratio: int,
    ) -> Image.Image:
        """
        Draw positioned blocks into one bitmap.

        Args:
            blocks: Measured (planned) blocks
            width_px: Document width in CSS pixels
            height_px: Document height in CSS pixels
            pixel_ratio: Device pixels per CSS pixel

        Returns:
            RGB image of (width_px * ratio, height_px * ratio)

        Raises:
            RasterizationError: If drawing fails
        """

    def __enter__(self) -> "RenderSurface":
        """Context manager entry - attach."""
        self.attach()
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit - always detach."""
        self.detach()
