"""
Module: exporter.surface.pillow_surface

Purpose:
    Pillow-backed rendering surface. Lays blocks out as a single tall
    column (top margin first, fixed gap between blocks) and draws the
    planned tree into one RGB bitmap.

    Layout and drawing share one code path per content type: each
    ``_render_*`` method draws through a ``_Pen`` and returns the height
    it used. During layout the pen is dry (measures only), so a block's
    measured height is exactly the height it is drawn at.

Key Classes:
    - PillowSurface: RenderSurface implementation

Dependencies:
    - PIL: Image, ImageDraw, ImageOps
    - exporter.surface.fonts: Font loading and wrapping
    - exporter.surface.images: Settled image cache

Used By:
    - exporter.controller: Default surface
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageOps

from sheet_toolkit.core.errors import RasterizationError
from sheet_toolkit.core.models import (
    Block,
    BlockContent,
    DocumentHeaderContent,
    ImageRowContent,
    ItemSummaryContent,
    PageGeometry,
    PriceTierCard,
    PriceTierRowContent,
    TableRowContent,
    TextContent,
    TextStyle,
)

from .base import RenderSurface
from .fonts import center_position, line_height, load_font, text_width, wrap_text
from .images import ImageLoader

logger = logging.getLogger(__name__)

# Colors
TEXT_COLOR = (17, 24, 39)
MUTED_COLOR = (107, 114, 128)
RULE_COLOR = (229, 231, 235)
PRICE_COLOR = (37, 99, 235)
DISCOUNT_COLOR = (220, 38, 38)
PLACEHOLDER_FILL = (243, 244, 246)
PLACEHOLDER_TEXT = (156, 163, 175)
WHITE = (255, 255, 255)

# (size px, bold, color) per text style
STYLE_FONTS = {
    TextStyle.BODY: (12, False, TEXT_COLOR),
    TextStyle.HEADING: (15, True, TEXT_COLOR),
    TextStyle.TITLE: (17, True, TEXT_COLOR),
    TextStyle.BULLETS: (12, False, TEXT_COLOR),
    TextStyle.MUTED: (10, False, MUTED_COLOR),
}

RULE_SPACE = 12
LOGO_SIZE = 48
SUMMARY_IMAGE_FRACTION = 0.4
COLUMN_GAP = 12
CARD_PADDING = 10
CELL_PADDING = 6
TABLE_COLUMNS = (0.07, 0.15, 0.48, 0.10, 0.20)
NO_IMAGE_LABEL = "Tanpa Gambar"


class _Pen:
    """
    Draws in CSS pixels onto a canvas scaled by ``scale``.

    A pen without a canvas is dry: every call is a no-op, which lets the
    same render code measure without drawing.
    """

    def __init__(self, canvas: Optional[Image.Image], scale: int, images: ImageLoader) -> None:
        self.canvas = canvas
        self.draw = ImageDraw.Draw(canvas) if canvas is not None else None
        self.scale = scale
        self.images = images

    @property
    def is_dry(self) -> bool:
        return self.draw is None

    def _s(self, value: float) -> int:
        return round(value * self.scale)

    def _font(self, size: int, bold: bool):
        return load_font(max(1, self._s(size)), bold)

    def text(
        self,
        x: float,
        y: float,
        text: str,
        size: int,
        *,
        bold: bool = False,
        fill=TEXT_COLOR,
        strike: bool = False,
    ) -> None:
        if self.draw is None or not text:
            return
        font = self._font(size, bold)
        self.draw.text((self._s(x), self._s(y)), text, font=font, fill=fill)
        if strike:
            width = self.draw.textlength(text, font=font)
            mid = self._s(y + size * 0.6)
            self.draw.line(
                [(self._s(x), mid), (self._s(x) + width, mid)],
                fill=fill,
                width=max(1, self.scale),
            )

    def text_right(self, right: float, y: float, text: str, size: int, *, bold: bool = False, fill=TEXT_COLOR) -> None:
        if self.draw is None or not text:
            return
        font = self._font(size, bold)
        width = self.draw.textlength(text, font=font)
        self.draw.text((self._s(right) - width, self._s(y)), text, font=font, fill=fill)

    def line(self, x1: float, y1: float, x2: float, y2: float, *, fill=RULE_COLOR, width: int = 1) -> None:
        if self.draw is None:
            return
        self.draw.line(
            [(self._s(x1), self._s(y1)), (self._s(x2), self._s(y2))],
            fill=fill,
            width=max(1, width * self.scale),
        )

    def rect(self, box: Tuple[float, float, float, float], *, fill=None, outline=None) -> None:
        if self.draw is None:
            return
        self.draw.rectangle(
            tuple(self._s(v) for v in box),
            fill=fill,
            outline=outline,
            width=max(1, self.scale),
        )

    def centered_text(self, box: Tuple[float, float, float, float], text: str, size: int, *, bold: bool = False, fill=TEXT_COLOR) -> None:
        if self.draw is None or not text:
            return
        font = self._font(size, bold)
        scaled = tuple(self._s(v) for v in box)
        self.draw.text(center_position(scaled, text, font, self.draw), text, font=font, fill=fill)

    def image(self, url: Optional[str], box: Tuple[float, float, float, float], placeholder: str = "") -> None:
        """Fit a settled image into ``box``; draw a placeholder if it is missing."""
        if self.draw is None:
            return
        img = self.images.get(url) if url else None
        if img is None:
            self.rect(box, fill=PLACEHOLDER_FILL, outline=RULE_COLOR)
            self.centered_text(box, placeholder, 11, fill=PLACEHOLDER_TEXT)
            return

        x1, y1, x2, y2 = (self._s(v) for v in box)
        fitted = ImageOps.contain(img, (max(1, x2 - x1), max(1, y2 - y1)))
        px = x1 + (x2 - x1 - fitted.width) // 2
        py = y1 + (y2 - y1 - fitted.height) // 2
        self.canvas.paste(fitted, (px, py), fitted)


class PillowSurface(RenderSurface):
    """
    Rendering surface drawing with Pillow.

    Attributes:
        geometry: Page geometry (margins position the column)
        block_gap_px: Vertical gap after every non-empty block

    Example:
        >>> with PillowSurface(config.geometry, ImageLoader()) as surface:
        ...     measured = surface.layout(blocks, config.geometry.page_width_px)
    """

    def __init__(
        self,
        geometry: PageGeometry,
        images: Optional[ImageLoader] = None,
        *,
        block_gap_px: int = 8,
    ) -> None:
        super().__init__(images or ImageLoader())
        self.geometry = geometry
        self.block_gap_px = block_gap_px
        self._renderers: Dict[type, Callable] = {
            TextContent: self._render_text,
            DocumentHeaderContent: self._render_header,
            ItemSummaryContent: self._render_summary,
            ImageRowContent: self._render_image_row,
            PriceTierRowContent: self._render_tier_row,
            TableRowContent: self._render_table_row,
        }

    # ─────────────────────────────────────────────────────────────────────────
    # RenderSurface API
    # ─────────────────────────────────────────────────────────────────────────

    def layout(self, blocks: Sequence[Block], width_px: int) -> List[Block]:
        self._require_attached()
        x, w = self._column(width_px)
        pen = _Pen(None, 1, self.images)
        y = float(self.geometry.margin_top_px)
        measured: List[Block] = []

        for block in blocks:
            try:
                height = self._render(block.content, pen, x, y, w)
            except (OSError, ValueError) as e:
                raise RasterizationError(f"Failed to lay out block {block.id}: {e}") from e
            measured.append(block.measured(y, height))
            y += height
            if height > 0:
                y += self.block_gap_px

        logger.debug(f"Laid out {len(measured)} blocks, content ends at {y:.0f}px")
        return measured

    def rasterize(
        self,
        blocks: Sequence[Block],
        width_px: int,
        height_px: int,
        pixel_ratio: int,
    ) -> Image.Image:
        self._require_attached()
        if pixel_ratio < 1:
            raise RasterizationError(f"pixel_ratio must be >= 1: {pixel_ratio}")
        if width_px <= 0 or height_px <= 0:
            raise RasterizationError(f"Invalid raster size {width_px}x{height_px}")

        try:
            canvas = Image.new("RGB", (width_px * pixel_ratio, height_px * pixel_ratio), WHITE)
        except (ValueError, MemoryError) as e:
            raise RasterizationError(f"Cannot allocate {width_px}x{height_px} raster: {e}") from e

        x, w = self._column(width_px)
        pen = _Pen(canvas, pixel_ratio, self.images)
        for block in blocks:
            if block.content is None:
                continue
            if not block.is_measured:
                raise RasterizationError(f"Cannot draw unmeasured block {block.id}")
            try:
                self._render(block.content, pen, x, block.top_px, w)
            except (OSError, ValueError) as e:
                raise RasterizationError(f"Failed to draw block {block.id}: {e}") from e

        logger.debug(f"Rasterized {len(blocks)} blocks at {canvas.width}x{canvas.height}")
        return canvas

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _column(self, width_px: int) -> Tuple[int, int]:
        """Left x and width of the content column."""
        width = width_px - self.geometry.margin_left_px - self.geometry.margin_right_px
        if width <= 0:
            raise RasterizationError(f"Width {width_px}px leaves no room between margins")
        return self.geometry.margin_left_px, width

    def _render(self, content: Optional[BlockContent], pen: _Pen, x: float, y: float, w: float) -> int:
        if content is None:
            return 0
        renderer = self._renderers.get(type(content))
        if renderer is None:
            raise RasterizationError(f"No renderer for {type(content).__name__}")
        return math.ceil(renderer(content, pen, x, y, w))

    @staticmethod
    def _lh(size: int, bold: bool = False) -> int:
        return line_height(load_font(size, bold))

    @staticmethod
    def _wrap(text: str, size: int, bold: bool, width: float) -> List[str]:
        return wrap_text(text, load_font(size, bold), width)

    def _paragraph(self, pen: _Pen, x: float, y: float, w: float, text: str, size: int,
                   *, bold: bool = False, fill=TEXT_COLOR) -> float:
        """Draw wrapped text; return height used."""
        lh = self._lh(size, bold)
        lines = self._wrap(text, size, bold, w)
        for i, line in enumerate(lines):
            pen.text(x, y + i * lh, line, size, bold=bold, fill=fill)
        return len(lines) * lh

    # ─────────────────────────────────────────────────────────────────────────
    # Content renderers: draw through ``pen``, return height in CSS px
    # ─────────────────────────────────────────────────────────────────────────

    def _render_text(self, content: TextContent, pen: _Pen, x: float, y: float, w: float) -> float:
        top = y
        if content.rule_above:
            pen.line(x, y + RULE_SPACE / 2, x + w, y + RULE_SPACE / 2)
            y += RULE_SPACE
        size, bold, color = STYLE_FONTS[content.style]
        y += self._paragraph(pen, x, y, w, content.text, size, bold=bold, fill=color)
        return y - top

    def _render_header(self, content: DocumentHeaderContent, pen: _Pen, x: float, y: float, w: float) -> float:
        top = y
        text_x = x
        band = 0
        if content.logo_url:
            pen.image(content.logo_url, (x, y, x + LOGO_SIZE, y + LOGO_SIZE))
            text_x = x + LOGO_SIZE + COLUMN_GAP
            band = LOGO_SIZE

        left = 0
        if content.brand_name:
            pen.text(text_x, y, content.brand_name, 18, bold=True)
            left += self._lh(18, True)
        if content.brand_tagline:
            pen.text(text_x, y + left, content.brand_tagline, 10, fill=MUTED_COLOR)
            left += self._lh(10)

        pen.text_right(x + w, y, content.document_title, 16, bold=True)
        right = self._lh(16, True)
        pen.text_right(x + w, y + right, content.date_label, 10, fill=MUTED_COLOR)
        right += self._lh(10)

        y += max(band, left, right) + 8
        pen.line(x, y, x + w, y, fill=TEXT_COLOR, width=2)
        y += 2 + RULE_SPACE

        if content.heading:
            y += self._paragraph(pen, x, y, w, content.heading, 20, bold=True)
        return y - top

    def _render_summary(self, content: ItemSummaryContent, pen: _Pen, x: float, y: float, w: float) -> float:
        image_size = round(w * SUMMARY_IMAGE_FRACTION)
        pen.image(content.image_url, (x, y, x + image_size, y + image_size), content.no_image_label)

        rx = x + image_size + 2 * COLUMN_GAP
        rw = w - image_size - 2 * COLUMN_GAP
        cy = y

        if content.discount_label:
            badge_h = self._lh(11, True) + 6
            badge_w = text_width(content.discount_label, load_font(11, True)) + 12
            pen.rect((rx, cy, rx + badge_w, cy + badge_h), fill=DISCOUNT_COLOR)
            pen.text(rx + 6, cy + 3, content.discount_label, 11, bold=True, fill=WHITE)
            cy += badge_h + 8
        if content.price_label:
            cy += self._paragraph(pen, rx, cy, rw, content.price_label, 20, bold=True, fill=PRICE_COLOR)
        if content.original_price_label:
            pen.text(rx, cy, content.original_price_label, 12, fill=MUTED_COLOR, strike=True)
            cy += self._lh(12)
        if content.quantity_label:
            cy += 4
            cy += self._paragraph(pen, rx, cy, rw, content.quantity_label, 12)
        if content.short_description:
            cy += 8
            pen.text(rx, cy, "Deskripsi Singkat", 10, bold=True, fill=MUTED_COLOR)
            cy += self._lh(10, True)
            cy += self._paragraph(pen, rx, cy, rw, content.short_description, 12)

        return max(image_size, cy - y)

    def _render_image_row(self, content: ImageRowContent, pen: _Pen, x: float, y: float, w: float) -> float:
        columns = max(1, content.columns)
        cell = (w - COLUMN_GAP * (columns - 1)) / columns
        for i, url in enumerate(content.urls):
            cx = x + i * (cell + COLUMN_GAP)
            pen.image(url, (cx, y, cx + cell, y + cell), NO_IMAGE_LABEL)
        return cell

    def _render_tier_card(self, card: PriceTierCard, pen: _Pen, x: float, y: float, w: float) -> float:
        top = y
        inner = w - 2 * CARD_PADDING
        cx = x + CARD_PADDING
        y += CARD_PADDING
        y += self._paragraph(pen, cx, y, inner, card.name, 12, bold=True)
        y += self._paragraph(pen, cx, y, inner, card.price_label, 15, bold=True, fill=PRICE_COLOR)
        if card.original_price_label:
            pen.text(cx, y, card.original_price_label, 10, fill=MUTED_COLOR, strike=True)
            y += self._lh(10)
        if card.description:
            y += 4
            y += self._paragraph(pen, cx, y, inner, card.description, 10, fill=MUTED_COLOR)
        return y + CARD_PADDING - top

    def _render_tier_row(self, content: PriceTierRowContent, pen: _Pen, x: float, y: float, w: float) -> float:
        columns = max(1, content.columns)
        cell = (w - COLUMN_GAP * (columns - 1)) / columns
        dry = _Pen(None, 1, self.images)
        height = max(
            (self._render_tier_card(card, dry, x, y, cell) for card in content.cards),
            default=0,
        )
        for i, card in enumerate(content.cards):
            cx = x + i * (cell + COLUMN_GAP)
            pen.rect((cx, y, cx + cell, y + height), outline=RULE_COLOR)
            self._render_tier_card(card, pen, cx, y, cell)
        return height

    def _render_table_row(self, content: TableRowContent, pen: _Pen, x: float, y: float, w: float) -> float:
        widths = [w * f for f in TABLE_COLUMNS]
        lefts = [x + sum(widths[:i]) for i in range(len(widths))]
        pad = CELL_PADDING

        if content.is_header:
            height = self._lh(11, True) + 2 * pad
            pen.rect((x, y, x + w, y + height), fill=PLACEHOLDER_FILL)
            for left, label in zip(lefts, content.cells):
                pen.text(left + pad, y + pad, label, 11, bold=True)
            return height

        number, _, name, quantity, price = content.cells
        thumb = widths[1] - 2 * pad

        name_x, name_w = lefts[2] + pad, widths[2] - 2 * pad
        text_h = self._paragraph(pen, name_x, y + pad, name_w, name, 12, bold=True)
        if content.description:
            text_h += self._paragraph(
                pen, name_x, y + pad + text_h, name_w, content.description, 10, fill=MUTED_COLOR,
            )

        price_h = self._paragraph(pen, lefts[4] + pad, y + pad, widths[4] - 2 * pad, price, 12, bold=True)
        if content.original_price_label:
            pen.text(lefts[4] + pad, y + pad + price_h, content.original_price_label, 10,
                     fill=MUTED_COLOR, strike=True)
            price_h += self._lh(10)

        pen.text(lefts[0] + pad, y + pad, number, 12)
        qty_h = self._paragraph(pen, lefts[3] + pad, y + pad, widths[3] - 2 * pad, quantity, 12)
        pen.image(content.image_url, (lefts[1] + pad, y + pad, lefts[1] + pad + thumb, y + pad + thumb), "-")

        height = max(thumb, text_h, price_h, qty_h) + 2 * pad
        pen.line(x, y + height, x + w, y + height)
        return height
