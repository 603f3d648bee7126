"""
Module: content

Purpose:
    Typed payloads carried by Blocks. A Block says *where* something sits
    and how it may break; its content says *what* the rendering surface
    must draw. Contents know nothing about pages.

Key Classes:
    - TextStyle: Visual style of a text block
    - TextContent: Paragraph, heading or bullet list
    - DocumentHeaderContent: Brand line, document title and date
    - ItemSummaryContent: Two-column image + price/quantity block
    - ImageRowContent: One row of attachment images
    - PriceTierRowContent: One row of price tier cards
    - TableRowContent: One price-list row (or its column header)

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.blocks.Block
    - exporter.assembly.assembler: Creates contents
    - exporter.surface.pillow_surface: Measures and draws contents
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class TextStyle(str, Enum):
    """Visual style for TextContent."""

    BODY = "body"
    HEADING = "heading"
    TITLE = "title"
    BULLETS = "bullets"
    MUTED = "muted"


@dataclass(frozen=True)
class TextContent:
    """
    Plain text block.

    Attributes:
        text: Text to draw; newlines are hard line breaks
        style: Visual style
        rule_above: Draw a thin separator rule above the text
    """

    text: str
    style: TextStyle = TextStyle.BODY
    rule_above: bool = False

    @property
    def image_urls(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class DocumentHeaderContent:
    """
    Document masthead drawn at the top of the first page.

    Attributes:
        document_title: Right-aligned title, e.g. "DETAIL PRODUK"
        date_label: Formatted export date
        brand_name: Left-aligned brand line
        brand_tagline: Second brand line (may be empty)
        logo_url: Optional logo image reference
        heading: Optional item heading drawn under the masthead rule
    """

    document_title: str
    date_label: str
    brand_name: str = ""
    brand_tagline: str = ""
    logo_url: Optional[str] = None
    heading: Optional[str] = None

    @property
    def image_urls(self) -> tuple[str, ...]:
        return (self.logo_url,) if self.logo_url else ()


@dataclass(frozen=True)
class ItemSummaryContent:
    """
    Two-column summary: image on the left, prices and quantity on the right.

    Price labels are pre-formatted by the assembler. When ``price_label``
    is None the item uses price tiers and no single price is drawn.
    """

    image_url: Optional[str]
    price_label: Optional[str] = None
    original_price_label: Optional[str] = None
    discount_label: Optional[str] = None
    quantity_label: Optional[str] = None
    short_description: Optional[str] = None
    no_image_label: str = "Tanpa Gambar"

    @property
    def image_urls(self) -> tuple[str, ...]:
        return (self.image_url,) if self.image_url else ()


@dataclass(frozen=True)
class ImageRowContent:
    """A row of attachment images, drawn in ``columns`` equal square cells."""

    urls: tuple[str, ...]
    columns: int = 2

    @property
    def image_urls(self) -> tuple[str, ...]:
        return self.urls


@dataclass(frozen=True)
class PriceTierCard:
    """One pre-formatted price tier card."""

    name: str
    price_label: str
    original_price_label: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class PriceTierRowContent:
    """A row of price tier cards, drawn in ``columns`` equal cells."""

    cards: tuple[PriceTierCard, ...]
    columns: int = 2

    @property
    def image_urls(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class TableRowContent:
    """
    One row of a price-list table.

    Column order is fixed: number, photo, name + description, quantity,
    price. A header row carries the column labels in ``cells`` and no
    image.
    """

    cells: tuple[str, str, str, str, str]
    image_url: Optional[str] = None
    description: str = ""
    original_price_label: Optional[str] = None
    is_header: bool = False

    @property
    def image_urls(self) -> tuple[str, ...]:
        return (self.image_url,) if self.image_url else ()


BlockContent = Union[
    TextContent,
    DocumentHeaderContent,
    ItemSummaryContent,
    ImageRowContent,
    PriceTierRowContent,
    TableRowContent,
]
