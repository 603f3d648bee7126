"""
Module: exporter.config

Purpose:
    Configuration dataclass for the export pipeline. Immutable
    configuration with validation on construction, plus JSON loading.

Key Classes:
    - ExportConfig: Page geometry, footer text, image waits, branding

Key Functions:
    - load_export_config(): Read an ExportConfig from a JSON file

Dependencies:
    - dataclasses (std)
    - json (std)

Used By:
    - exporter.controller: Main export controller
    - exporter.assembly.assembler: Titles and labels
    - exporter.output.compositor: Footer overlay
    - cli
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from sheet_toolkit.core.models import PageGeometry

MM_PER_INCH = 25.4

DEFAULT_DISCLAIMER = "Dokumen ini dibuat secara otomatis oleh sistem."
DEFAULT_PAGE_LABEL = "Halaman {page} dari {total}"

_INT_FIELDS = ("css_px_per_inch", "pixel_ratio", "top_tolerance_px", "block_gap_px")
_NUMBER_FIELDS = (
    "page_width_mm",
    "page_height_mm",
    "margin_top_mm",
    "margin_bottom_mm",
    "margin_left_mm",
    "margin_right_mm",
    "footer_reserve_mm",
    "image_timeout_s",
    "image_settle_timeout_s",
    "footer_rule_offset_mm",
    "footer_text_offset_mm",
)


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for exporting documents (immutable).

    Physical sizes are in millimetres; the planner works in CSS pixels
    derived through ``css_px_per_inch``. The raster is drawn at
    ``pixel_ratio`` device pixels per CSS pixel.

    Attributes:
        page_width_mm: Page width (A4 = 210)
        page_height_mm: Page height (A4 = 297)
        margin_*_mm: Page margins
        footer_reserve_mm: Bottom cover band (None = bottom margin)
        css_px_per_inch: CSS pixel density used for layout
        pixel_ratio: Raster scale factor
        top_tolerance_px: "Close enough to the top" distance
        block_gap_px: Vertical gap between stacked blocks
        image_timeout_s: Max wait for a single image
        image_settle_timeout_s: Max wait for all images of one call
        fail_on_image_timeout: Raise MeasurementTimeout instead of
            drawing a placeholder when the settle budget runs out
        disclaimer: Footer disclaimer text
        page_label: Footer page label template ({page}, {total})
        footer_rule_offset_mm: Footer rule distance from page bottom
        footer_text_offset_mm: Footer text baseline distance from bottom
        brand_name / brand_tagline / logo_path: Masthead branding
        detail_title / list_title: Masthead document titles
        attachments_title: Title above attachment images
        item_starts_new_page: Group-detail items each start a fresh page
        output_dir: Where FILE mode writes PDFs

    Example:
        >>> config = ExportConfig(margin_top_mm=15)
        >>> config.geometry.margin_top_px
        57
    """

    # Page
    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    margin_top_mm: float = 20.0
    margin_bottom_mm: float = 20.0
    margin_left_mm: float = 20.0
    margin_right_mm: float = 20.0
    footer_reserve_mm: Optional[float] = None

    # Rendering
    css_px_per_inch: int = 96
    pixel_ratio: int = 2
    top_tolerance_px: int = 50
    block_gap_px: int = 8

    # Images
    image_timeout_s: float = 10.0
    image_settle_timeout_s: float = 30.0
    fail_on_image_timeout: bool = False

    # Footer
    disclaimer: str = DEFAULT_DISCLAIMER
    page_label: str = DEFAULT_PAGE_LABEL
    footer_rule_offset_mm: float = 15.0
    footer_text_offset_mm: float = 10.0

    # Masthead
    brand_name: str = ""
    brand_tagline: str = ""
    logo_path: Optional[str] = None
    detail_title: str = "DETAIL PRODUK"
    list_title: str = "DAFTAR HARGA"
    attachments_title: str = "Lampiran"

    # Behavior
    item_starts_new_page: bool = False
    output_dir: Path = Path(".")

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer: {value!r}")
        for name in _NUMBER_FIELDS:
            value = getattr(self, name)
            if value is None and name == "footer_reserve_mm":
                continue
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"{name} must be a number: {value!r}")
        if self.page_width_mm <= 0 or self.page_height_mm <= 0:
            raise ValueError("Page size must be positive")
        if self.margin_top_mm + self.margin_bottom_mm >= self.page_height_mm:
            raise ValueError("Margins exceed page height")
        if self.margin_left_mm + self.margin_right_mm >= self.page_width_mm:
            raise ValueError("Margins exceed page width")
        if self.footer_reserve_mm is not None and not (
            0 <= self.footer_reserve_mm <= self.margin_bottom_mm
        ):
            raise ValueError(f"footer_reserve_mm must be within the bottom margin: {self.footer_reserve_mm}")
        if self.css_px_per_inch <= 0:
            raise ValueError(f"css_px_per_inch must be positive: {self.css_px_per_inch}")
        if self.pixel_ratio < 1:
            raise ValueError(f"pixel_ratio must be >= 1: {self.pixel_ratio}")
        if self.top_tolerance_px < 0 or self.block_gap_px < 0:
            raise ValueError("top_tolerance_px and block_gap_px must be non-negative")
        if self.image_timeout_s <= 0 or self.image_settle_timeout_s <= 0:
            raise ValueError("Image timeouts must be positive")
        if "{page}" not in self.page_label or "{total}" not in self.page_label:
            raise ValueError(f"page_label must contain {{page}} and {{total}}: {self.page_label!r}")

    def mm_to_px(self, mm: float) -> int:
        """Convert millimetres to whole CSS pixels."""
        return round(mm / MM_PER_INCH * self.css_px_per_inch)

    @property
    def geometry(self) -> PageGeometry:
        """Page geometry in CSS pixels used for planning and slicing."""
        return PageGeometry(
            page_width_px=self.mm_to_px(self.page_width_mm),
            page_height_px=self.mm_to_px(self.page_height_mm),
            margin_top_px=self.mm_to_px(self.margin_top_mm),
            margin_bottom_px=self.mm_to_px(self.margin_bottom_mm),
            margin_left_px=self.mm_to_px(self.margin_left_mm),
            margin_right_px=self.mm_to_px(self.margin_right_mm),
            footer_reserve_px=(
                None if self.footer_reserve_mm is None
                else self.mm_to_px(self.footer_reserve_mm)
            ),
            top_tolerance_px=self.top_tolerance_px,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExportConfig":
        """
        Build a config from a plain dict (e.g. parsed JSON).

        Raises:
            ValueError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        values = dict(data)
        if "output_dir" in values:
            values["output_dir"] = Path(values["output_dir"])
        return cls(**values)


def load_export_config(path: Path) -> ExportConfig:
    """
    Load ExportConfig from a JSON file.

    Args:
        path: JSON file with a single object of ExportConfig fields

    Returns:
        Validated ExportConfig

    Raises:
        ValueError: If the file is not a JSON object or values are invalid
        OSError: If the file cannot be read
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return ExportConfig.from_dict(data)
