"""
Module: document

Purpose:
    Page geometry and the composed Document. Geometry is expressed in
    integer CSS pixels; planning always reasons in fixed-size page bands
    of ``page_height_px``.

Key Classes:
    - PageGeometry: Page size, margins, footer reserve, top tolerance
    - Page: One vertical band of the composed document (1-based index)
    - Document: Ordered blocks plus geometry

Dependencies:
    - dataclasses (std)
    - math (std)

Used By:
    - exporter.config: Builds PageGeometry
    - exporter.layout.planner: Break decisions
    - exporter.output.compositor: Slicing
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .blocks import Block, BlockRole


@dataclass(frozen=True)
class PageGeometry:
    """
    Physical page geometry in CSS pixels (immutable).

    Attributes:
        page_width_px: Page width
        page_height_px: Page height (one page band)
        margin_top_px: Top margin; content of every page starts here
        margin_bottom_px: Bottom margin; content must end above it
        margin_left_px: Left margin
        margin_right_px: Right margin
        footer_reserve_px: Height of the bottom cover band drawn by the
            compositor (None = margin_bottom_px)
        top_tolerance_px: Blocks within this distance below the top
            margin count as "already at the top"

    Example:
        >>> g = PageGeometry(page_height_px=1100, margin_top_px=50, margin_bottom_px=50)
        >>> g.body_height_px
        1000
    """

    page_width_px: int = 794
    page_height_px: int = 1123
    margin_top_px: int = 76
    margin_bottom_px: int = 76
    margin_left_px: int = 76
    margin_right_px: int = 76
    footer_reserve_px: Optional[int] = None
    top_tolerance_px: int = 50

    def __post_init__(self) -> None:
        """Validate geometry on construction."""
        if self.page_width_px <= 0:
            raise ValueError(f"page_width_px must be positive: {self.page_width_px}")
        if self.page_height_px <= 0:
            raise ValueError(f"page_height_px must be positive: {self.page_height_px}")
        if min(self.margin_top_px, self.margin_bottom_px,
               self.margin_left_px, self.margin_right_px) < 0:
            raise ValueError("Margins must be non-negative")
        if self.body_height_px <= 0:
            raise ValueError("Margins exceed page height")
        if self.body_width_px <= 0:
            raise ValueError("Margins exceed page width")
        if self.top_tolerance_px < 0:
            raise ValueError(f"top_tolerance_px must be >= 0: {self.top_tolerance_px}")
        if self.footer_reserve_px is not None and not (
            0 <= self.footer_reserve_px <= self.margin_bottom_px
        ):
            raise ValueError(
                f"footer_reserve_px must be within the bottom margin: {self.footer_reserve_px}"
            )

    @property
    def body_height_px(self) -> int:
        """Usable content height of one page."""
        return self.page_height_px - self.margin_top_px - self.margin_bottom_px

    @property
    def body_width_px(self) -> int:
        """Usable content width of one page."""
        return self.page_width_px - self.margin_left_px - self.margin_right_px

    @property
    def cover_band_px(self) -> int:
        """Height of the bottom band the compositor paints over."""
        if self.footer_reserve_px is None:
            return self.margin_bottom_px
        return self.footer_reserve_px

    def page_index_of(self, y: float) -> int:
        """0-based page band containing document y."""
        return math.floor(y / self.page_height_px)

    def page_bottom_limit(self, page_index: int) -> float:
        """Lowest y content on ``page_index`` may reach."""
        return (page_index + 1) * self.page_height_px - self.margin_bottom_px

    def next_page_top(self, page_index: int) -> float:
        """Content start y of the page after ``page_index``."""
        return (page_index + 1) * self.page_height_px + self.margin_top_px

    def page_count_for(self, total_height_px: float) -> int:
        """N such that (N-1)*H < total <= N*H (at least 1)."""
        if total_height_px <= 0:
            return 1
        return max(1, math.ceil(total_height_px / self.page_height_px))

    def pages_for(self, total_height_px: float) -> tuple["Page", ...]:
        """Page bands covering a document of the given height."""
        return tuple(
            Page(
                index=i,
                y_start=(i - 1) * self.page_height_px + self.margin_top_px,
                y_end=i * self.page_height_px - self.margin_bottom_px,
            )
            for i in range(1, self.page_count_for(total_height_px) + 1)
        )


@dataclass(frozen=True)
class Page:
    """
    Content band of one page.

    Attributes:
        index: 1-based page number
        y_start: First content y (document space)
        y_end: Content limit y (document space)
    """

    index: int
    y_start: float
    y_end: float

    @property
    def height(self) -> float:
        return self.y_end - self.y_start


@dataclass(frozen=True)
class Document:
    """
    Ordered, measured blocks plus the geometry they were planned against.

    Created fresh per export call and never persisted.
    """

    blocks: tuple[Block, ...]
    geometry: PageGeometry

    @property
    def content_bottom_px(self) -> float:
        """Lowest block bottom (top margin if there are no blocks)."""
        bottoms = [b.bottom_px for b in self.blocks if b.is_measured]
        return max(bottoms) if bottoms else float(self.geometry.margin_top_px)

    @property
    def total_height_px(self) -> int:
        """Full document height including the trailing bottom margin."""
        return math.ceil(self.content_bottom_px + self.geometry.margin_bottom_px)

    @property
    def pages(self) -> tuple[Page, ...]:
        return self.geometry.pages_for(self.total_height_px)

    @property
    def page_count(self) -> int:
        return self.geometry.page_count_for(self.total_height_px)

    @property
    def spacer_count(self) -> int:
        return sum(1 for b in self.blocks if b.role is BlockRole.SPACER)

    def image_urls(self) -> tuple[str, ...]:
        """Unique image references in document order."""
        seen: dict[str, None] = {}
        for block in self.blocks:
            for url in block.image_urls:
                seen.setdefault(url, None)
        return tuple(seen)
