"""
Module: exporter.layout.measurer

Purpose:
    Attach geometry to an assembled block tree and turn a planned tree
    into the document raster. Both steps settle every referenced image
    first, under the loader's bounded waits.

Key Functions:
    - measure_blocks(): Settle images, lay out once, verify geometry
    - rasterize_document(): Re-settle images, draw the planned tree

Dependencies:
    - exporter.surface: RenderSurface, SettleReport

Used By:
    - exporter.controller: Main export controller
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from PIL import Image

from sheet_toolkit.core.errors import MeasurementTimeout, RasterizationError
from sheet_toolkit.core.models import Block, Document
from sheet_toolkit.exporter.config import ExportConfig
from sheet_toolkit.exporter.surface import RenderSurface, SettleReport

logger = logging.getLogger(__name__)


def _image_urls(blocks: Sequence[Block]) -> List[str]:
    return list(dict.fromkeys(url for block in blocks for url in block.image_urls))


def _settle(blocks: Sequence[Block], surface: RenderSurface, config: ExportConfig) -> SettleReport:
    """Settle images; raise if any timed out and the config demands it."""
    report = surface.images.settle(_image_urls(blocks))
    if report.timed_out and config.fail_on_image_timeout:
        raise MeasurementTimeout(
            f"{len(report.timed_out)} image(s) did not settle within "
            f"{config.image_settle_timeout_s:.0f}s",
            urls=tuple(report.timed_out),
        )
    return report


def measure_blocks(
    blocks: Sequence[Block],
    surface: RenderSurface,
    config: ExportConfig,
) -> List[Block]:
    """
    Measure an assembled block tree (exactly once per export).

    Args:
        blocks: Unmeasured blocks in document order
        surface: Attached rendering surface
        config: Export configuration (page width, image policy)

    Returns:
        Measured blocks in document order

    Raises:
        MeasurementTimeout: If images time out and fail_on_image_timeout
        RasterizationError: If the surface returns a wrong or unmeasured tree

    Example:
        >>> with PillowSurface(config.geometry) as surface:
        ...     measured = measure_blocks(blocks, surface, config)
        >>> all(b.is_measured for b in measured)
        True
    """
    report = _settle(blocks, surface, config)
    measured = surface.layout(blocks, config.geometry.page_width_px)

    if [b.id for b in measured] != [b.id for b in blocks]:
        raise RasterizationError("Surface layout changed the block sequence")
    missing = [b.id for b in measured if not b.is_measured]
    if missing:
        raise RasterizationError(f"Surface left blocks unmeasured: {', '.join(missing)}")

    logger.info(
        f"Measured {len(measured)} blocks "
        f"({len(report.loaded)} images loaded, "
        f"{len(report.failed) + len(report.timed_out)} placeholders)"
    )
    return measured


def rasterize_document(
    document: Document,
    surface: RenderSurface,
    config: ExportConfig,
) -> Image.Image:
    """
    Draw a planned document into one bitmap.

    The raster is ``page_width_px * pixel_ratio`` wide and
    ``total_height_px * pixel_ratio`` tall.

    Args:
        document: Planned (spacer-inclusive) document
        surface: Attached rendering surface
        config: Export configuration (pixel ratio, image policy)

    Returns:
        RGB raster of the whole document

    Raises:
        MeasurementTimeout: If images time out and fail_on_image_timeout
        RasterizationError: If drawing fails or the raster size is wrong
    """
    _settle(document.blocks, surface, config)

    width = document.geometry.page_width_px
    height = document.total_height_px
    ratio = config.pixel_ratio
    raster = surface.rasterize(document.blocks, width, height, ratio)

    if raster.size != (width * ratio, height * ratio):
        raise RasterizationError(
            f"Raster is {raster.size[0]}x{raster.size[1]}, "
            f"expected {width * ratio}x{height * ratio}"
        )
    logger.info(f"Rasterized document: {raster.size[0]}x{raster.size[1]}px")
    return raster
