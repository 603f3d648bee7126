"""
Module: exporter.output

Purpose:
    Page slicing, PDF composition and delivery.

Key Functions:
    - compose_pdf(): Raster to paginated PDF
    - deliver(): File / blob / bytes output
    - draw_footer(): Per-page footer overlay

Dependencies:
    - reportlab: PDF generation
    - PIL: Raster slicing

Used By:
    - exporter.controller: Pipeline orchestration
"""

from .compositor import (
    compose_pdf,
    deliver,
    slice_page,
    page_count_for_raster,
    OutputMode,
    ExportBlob,
)
from .overlay import draw_footer, format_page_label

__all__ = [
    "compose_pdf",
    "deliver",
    "slice_page",
    "page_count_for_raster",
    "OutputMode",
    "ExportBlob",
    "draw_footer",
    "format_page_label",
]
