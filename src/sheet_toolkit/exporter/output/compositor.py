"""
Module: exporter.output.compositor

Purpose:
    Slice the document raster into page bands and compose them into a
    PDF, then hand the PDF to the caller as a file, a blob or raw bytes.

Key Functions:
    - compose_pdf(): Raster -> PDF bytes, one page per band
    - slice_page(): Cut one page band out of the raster
    - deliver(): Route PDF bytes to the requested output mode

Key Classes:
    - OutputMode: FILE, BLOB or BYTES
    - ExportBlob: In-memory PDF with size metadata

Algorithm:
    N = ceil(raster_height / page_height) is computed once. Page i shows
    raster rows [(i-1)*H, i*H) scaled to the full page; the last band is
    padded with white. The footer overlay is drawn over every band.

Dependencies:
    - reportlab: PDF generation
    - PIL: Band cropping

Used By:
    - exporter.controller: Main export controller
"""

from __future__ import annotations

import base64
import io
import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from sheet_toolkit.core.errors import CompositionError
from sheet_toolkit.core.models import PageGeometry
from sheet_toolkit.core.utils import format_bytes
from sheet_toolkit.exporter.config import ExportConfig

from .overlay import draw_footer, px_to_pt

logger = logging.getLogger(__name__)


class OutputMode(str, Enum):
    """How an export is handed back to the caller."""

    FILE = "file"
    BLOB = "blob"
    BYTES = "bytes"


@dataclass(frozen=True)
class ExportBlob:
    """
    In-memory PDF for previewing.

    Attributes:
        data: PDF bytes
        filename: Suggested file name
    """

    data: bytes
    filename: str
    content_type: str = "application/pdf"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def formatted_size(self) -> str:
        return format_bytes(self.size)

    def to_data_uri(self) -> str:
        """Base64 data URI usable as a preview URL."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


def page_count_for_raster(raster_height: int, geometry: PageGeometry, pixel_ratio: int) -> int:
    """N with (N-1)*H < height <= N*H, in raster pixels."""
    band = geometry.page_height_px * pixel_ratio
    return max(1, math.ceil(raster_height / band))


def slice_page(raster: Image.Image, page_number: int, geometry: PageGeometry, pixel_ratio: int) -> Image.Image:
    """
    Cut page ``page_number`` (1-based) out of the raster.

    Returns:
        RGB image of exactly one page; rows past the raster end are white
    """
    band = geometry.page_height_px * pixel_ratio
    top = (page_number - 1) * band
    bottom = min(top + band, raster.height)

    page = Image.new("RGB", (raster.width, band), (255, 255, 255))
    if bottom > top:
        page.paste(raster.crop((0, top, raster.width, bottom)), (0, 0))
    return page


def compose_pdf(
    raster: Image.Image,
    geometry: PageGeometry,
    config: ExportConfig,
    *,
    title: str = "",
) -> bytes:
    """
    Compose the raster into a paginated PDF.

    Args:
        raster: Full document raster at ``config.pixel_ratio``
        geometry: Geometry used for planning
        config: Footer settings and pixel ratio
        title: PDF metadata title

    Returns:
        PDF file contents

    Raises:
        CompositionError: If the raster size does not match the geometry
            or ReportLab fails

    Example:
        >>> pdf = compose_pdf(raster, config.geometry, config)
        >>> pdf[:5]
        b'%PDF-'
    """
    ratio = config.pixel_ratio
    if raster.width != geometry.page_width_px * ratio:
        raise CompositionError(
            f"Raster width {raster.width} does not match page width "
            f"{geometry.page_width_px}px at ratio {ratio}"
        )

    page_width_pt = px_to_pt(geometry.page_width_px, config.css_px_per_inch)
    page_height_pt = px_to_pt(geometry.page_height_px, config.css_px_per_inch)
    total_pages = page_count_for_raster(raster.height, geometry, ratio)

    buf = io.BytesIO()
    try:
        c = canvas.Canvas(buf, pagesize=(page_width_pt, page_height_pt), invariant=1)
        if title:
            c.setTitle(title)
        for page_number in range(1, total_pages + 1):
            band = slice_page(raster, page_number, geometry, ratio)
            c.drawImage(ImageReader(band), 0, 0, width=page_width_pt, height=page_height_pt)
            draw_footer(c, page_number, total_pages, geometry, config)
            c.showPage()
        c.save()
    except (OSError, ValueError) as e:
        raise CompositionError(f"Failed to build PDF: {e}") from e

    data = buf.getvalue()
    logger.info(f"Composed {total_pages} pages ({format_bytes(len(data))})")
    return data


def deliver(
    data: bytes,
    mode: OutputMode,
    filename: str,
    output_dir: Optional[Path] = None,
) -> Union[Path, ExportBlob, bytes]:
    """
    Hand PDF bytes to the caller in the requested mode.

    Args:
        data: PDF bytes
        mode: OutputMode
        filename: File name for FILE mode and blob metadata
        output_dir: Target directory for FILE mode

    Returns:
        Written path (FILE), ExportBlob (BLOB) or the bytes (BYTES)

    Raises:
        CompositionError: If the file cannot be written
    """
    mode = OutputMode(mode)
    if mode is OutputMode.BYTES:
        return data
    if mode is OutputMode.BLOB:
        return ExportBlob(data=data, filename=filename)

    path = Path(output_dir or ".") / filename
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise CompositionError(f"Cannot write {path}: {e}") from e
    logger.info(f"Saved {path}")
    return path
