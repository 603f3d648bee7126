"""
Module: exporter.controller

Purpose:
    Orchestrate one export call.
    Assemble → Measure → Plan → Rasterize → Slice/Compose → Deliver

Key Functions:
    - export(): Main entry point for any payload
    - export_product_detail(), export_price_list(), export_group_detail():
      Convenience wrappers taking plain dicts

Key Classes:
    - ExportResult: Output plus pagination metadata

Dependencies:
    - exporter.assembly: Block trees
    - exporter.layout: Measurement and planning
    - exporter.surface: Rendering surface
    - exporter.output: PDF composition

Used By:
    - sheet_toolkit.cli
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from sheet_toolkit.core.errors import ExportError
from sheet_toolkit.core.models import Block, DetailPayload, ExportPayload, ItemPayload, ListPayload
from sheet_toolkit.core.utils import slugify_filename

from .assembly import assemble
from .config import ExportConfig
from .layout import measure_blocks, plan_breaks, rasterize_document
from .output import ExportBlob, OutputMode, compose_pdf, deliver
from .surface import ImageLoader, PillowSurface, RenderSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """
    Complete export result (immutable).

    Attributes:
        output: Written path (FILE), ExportBlob (BLOB) or bytes (BYTES)
        mode: OutputMode used
        filename: PDF file name
        page_count: Number of pages in the PDF
        spacers_inserted: Spacers added by the planner
        headers_inserted: Header clusters re-emitted on continuation pages
        oversized_block_ids: Blocks taller than one page body
        warnings: Any warnings raised while planning
        blocks: Planned block sequence (for inspection)

    Example:
        >>> result = export(DetailPayload(item), return_blob=True)
        >>> result.blob.formatted_size
        '48.2 KB'
    """

    output: Union[Path, ExportBlob, bytes]
    mode: OutputMode
    filename: str
    page_count: int
    spacers_inserted: int = 0
    headers_inserted: int = 0
    oversized_block_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    blocks: tuple[Block, ...] = ()

    @property
    def path(self) -> Optional[Path]:
        return self.output if self.mode is OutputMode.FILE else None

    @property
    def blob(self) -> Optional[ExportBlob]:
        return self.output if self.mode is OutputMode.BLOB else None

    @property
    def data(self) -> bytes:
        """PDF bytes (reads the file in FILE mode)."""
        if self.mode is OutputMode.FILE:
            return self.output.read_bytes()
        if self.mode is OutputMode.BLOB:
            return self.output.data
        return self.output


def output_filename(payload: ExportPayload) -> str:
    """
    File name for a payload.

    Example:
        >>> output_filename(DetailPayload(ItemPayload("Sensor Kit", 10)))
        'Detail-Produk-sensor-kit.pdf'
    """
    if isinstance(payload, DetailPayload):
        return f"Detail-Produk-{slugify_filename(payload.item.name)}.pdf"
    return f"Daftar-Harga-{slugify_filename(payload.group.name)}.pdf"


def _document_title(payload: ExportPayload) -> str:
    if isinstance(payload, DetailPayload):
        return payload.item.name
    return payload.group.name


def export(
    payload: ExportPayload,
    config: Optional[ExportConfig] = None,
    *,
    return_blob: bool = False,
    mode: Optional[OutputMode] = None,
    output_dir: Optional[Path] = None,
    surface: Optional[RenderSurface] = None,
    export_date: Optional[date] = None,
) -> ExportResult:
    """
    Export a payload to a paginated PDF.

    Pipeline:
    1. Assemble the block tree
    2. Measure it on an attached surface (images settled first)
    3. Plan page breaks (spacers, repeated headers)
    4. Rasterize the planned tree
    5. Slice into pages and compose the PDF with footers
    6. Deliver as file, blob or bytes

    The surface is attached for the whole call and always detached,
    whether the export succeeds or fails. No partial output is returned.

    Args:
        payload: DetailPayload or ListPayload
        config: Export configuration (default: ExportConfig())
        return_blob: Shorthand for mode=OutputMode.BLOB
        mode: Output mode; overrides return_blob (default FILE)
        output_dir: FILE mode target (default: config.output_dir)
        surface: Rendering surface (default: PillowSurface for config)
        export_date: Masthead date (default: today)

    Returns:
        ExportResult

    Raises:
        ExportError: Any stage failure (AssemblyError, MeasurementTimeout,
            RasterizationError, CompositionError)
    """
    config = config or ExportConfig()
    if mode is None:
        mode = OutputMode.BLOB if return_blob else OutputMode.FILE
    mode = OutputMode(mode)
    geometry = config.geometry
    filename = output_filename(payload)

    if surface is None:
        surface = PillowSurface(
            geometry,
            ImageLoader(
                timeout_s=config.image_timeout_s,
                settle_timeout_s=config.image_settle_timeout_s,
            ),
            block_gap_px=config.block_gap_px,
        )

    start_time = time.perf_counter()
    logger.info(f"Starting export of {filename} ({mode.value})")

    surface.attach()
    try:
        blocks = assemble(payload, config, export_date=export_date)
        logger.info(f"Assembled {len(blocks)} blocks")

        measured = measure_blocks(blocks, surface, config)
        plan = plan_breaks(measured, geometry)
        document = plan.document

        raster = rasterize_document(document, surface, config)
        pdf = compose_pdf(raster, geometry, config, title=_document_title(payload))
        output = deliver(pdf, mode, filename, output_dir or config.output_dir)
    except Exception as e:
        kind = "failed" if isinstance(e, ExportError) else "failed unexpectedly"
        logger.exception(f"Export of {filename} {kind}")
        raise
    finally:
        surface.detach()

    elapsed = time.perf_counter() - start_time
    logger.info(f"Exported {filename}: {plan.page_count} pages in {elapsed:.2f}s")

    return ExportResult(
        output=output,
        mode=mode,
        filename=filename,
        page_count=plan.page_count,
        spacers_inserted=plan.spacers_inserted,
        headers_inserted=plan.headers_inserted,
        oversized_block_ids=plan.oversized_block_ids,
        warnings=tuple(plan.warnings),
        blocks=plan.blocks,
    )


def export_product_detail(
    item: Mapping[str, Any],
    config: Optional[ExportConfig] = None,
    **kwargs: Any,
) -> ExportResult:
    """Export one item (plain dict) as a detail document."""
    return export(DetailPayload(ItemPayload.from_dict(item)), config, **kwargs)


def export_price_list(
    group: Mapping[str, Any],
    items: list,
    config: Optional[ExportConfig] = None,
    **kwargs: Any,
) -> ExportResult:
    """Export a group (plain dicts) as a price-list table."""
    payload = ListPayload.from_dict({"group": group, "items": items})
    return export(payload, config, **kwargs)


def export_group_detail(
    group: Mapping[str, Any],
    items: list,
    config: Optional[ExportConfig] = None,
    **kwargs: Any,
) -> ExportResult:
    """Export a group (plain dicts) as numbered detail sections."""
    payload = ListPayload.from_dict({"group": group, "items": items}, detailed=True)
    return export(payload, config, **kwargs)
