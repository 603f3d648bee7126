"""
Module: exporter.output.overlay

Purpose:
    Footer overlay drawn on every PDF page after the page's raster band:
    a white cover over the bottom margin band, a thin rule, the
    disclaimer on the left and "Halaman i dari N" on the right.

Key Functions:
    - draw_footer(): Draw the full overlay on the current page
    - format_page_label(): Fill the page label template

Dependencies:
    - reportlab: Canvas drawing

Used By:
    - exporter.output.compositor
"""

from __future__ import annotations

import logging

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from sheet_toolkit.core.models import PageGeometry
from sheet_toolkit.exporter.config import ExportConfig

logger = logging.getLogger(__name__)

FOOTER_FONT = "Helvetica"
FOOTER_FONT_SIZE = 8
FOOTER_TEXT_RGB = (156 / 255, 163 / 255, 175 / 255)
FOOTER_RULE_RGB = (229 / 255, 231 / 255, 235 / 255)
POINTS_PER_INCH = 72


def px_to_pt(px: float, css_px_per_inch: int) -> float:
    """Convert CSS pixels to PDF points."""
    return px * POINTS_PER_INCH / css_px_per_inch


def format_page_label(template: str, page: int, total: int) -> str:
    """
    Fill the page label template.

    Example:
        >>> format_page_label("Halaman {page} dari {total}", 2, 5)
        'Halaman 2 dari 5'
    """
    return template.format(page=page, total=total)


def draw_footer(
    c: canvas.Canvas,
    page_number: int,
    total_pages: int,
    geometry: PageGeometry,
    config: ExportConfig,
) -> None:
    """
    Draw the footer overlay on the current page.

    Args:
        c: ReportLab canvas positioned on the page
        page_number: 1-based page number
        total_pages: Page count, computed once before the page loop
        geometry: Page geometry in CSS pixels
        config: Footer texts and offsets
    """
    dpi = config.css_px_per_inch
    page_width_pt = px_to_pt(geometry.page_width_px, dpi)
    left_pt = px_to_pt(geometry.margin_left_px, dpi)
    right_pt = page_width_pt - px_to_pt(geometry.margin_right_px, dpi)

    c.saveState()

    # Cover the bottom band so the next page's content never bleeds in
    c.setFillColorRGB(1, 1, 1)
    c.rect(0, 0, page_width_pt, px_to_pt(geometry.cover_band_px, dpi), stroke=0, fill=1)

    rule_y = config.footer_rule_offset_mm * mm
    c.setStrokeColorRGB(*FOOTER_RULE_RGB)
    c.setLineWidth(0.5)
    c.line(left_pt, rule_y, right_pt, rule_y)

    text_y = config.footer_text_offset_mm * mm
    c.setFont(FOOTER_FONT, FOOTER_FONT_SIZE)
    c.setFillColorRGB(*FOOTER_TEXT_RGB)
    c.drawString(left_pt, text_y, config.disclaimer)
    c.drawRightString(right_pt, text_y, format_page_label(config.page_label, page_number, total_pages))

    c.restoreState()
