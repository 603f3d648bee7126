"""
Module: exporter.surface.fonts

Purpose:
    Font loading and text metrics for the Pillow surface.

Key Functions:
    - load_font(): Cached TrueType font with default fallback
    - wrap_text(): Greedy word wrap to a pixel width
    - line_height(): Line advance for a font
    - center_position(): Top-left position centering text in a box

Dependencies:
    - PIL: ImageFont, ImageDraw

Used By:
    - exporter.surface.pillow_surface
"""

from __future__ import annotations

import functools
import logging
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

REGULAR_FONTS = (
    "DejaVuSans.ttf",
    "arial.ttf",        # Windows
    "Arial.ttf",        # Mac
    "LiberationSans-Regular.ttf",
)
BOLD_FONTS = (
    "DejaVuSans-Bold.ttf",
    "arialbd.ttf",
    "Arial Bold.ttf",
    "LiberationSans-Bold.ttf",
)

# Scratch surface for measuring text
_MEASURE = ImageDraw.Draw(Image.new("RGB", (1, 1)))


@functools.lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    """
    Load a font at ``size`` pixels.

    Prefers TrueType fonts; falls back to Pillow's bundled default.

    Args:
        size: Font size in pixels
        bold: Prefer bold variants

    Returns:
        Font object
    """
    for font_name in (BOLD_FONTS if bold else REGULAR_FONTS):
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning("Could not load TrueType font, using default")
    return ImageFont.load_default(size=size)


def text_width(text: str, font: ImageFont.ImageFont) -> float:
    return _MEASURE.textlength(text, font=font)


def line_height(font: ImageFont.ImageFont, spacing: float = 1.35) -> int:
    """Line advance: glyph box height of 'Ag' times ``spacing``."""
    left, top, right, bottom = _MEASURE.textbbox((0, 0), "Ag", font=font)
    return max(1, round((bottom - top) * spacing))


def wrap_text(text: str, font: ImageFont.ImageFont, max_width: float) -> List[str]:
    """
    Greedy word wrap; hard newlines are kept.

    Words longer than ``max_width`` are broken by character.

    Example:
        >>> wrap_text("a b c", font, 1000)
        ['a b c']
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            # Break overlong words
            while word and text_width(word, font) > max_width:
                cut = len(word)
                while cut > 1 and text_width(word[:cut], font) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


def center_position(
    bbox: Tuple[float, float, float, float],
    text: str,
    font: ImageFont.ImageFont,
    draw: ImageDraw.ImageDraw,
) -> Tuple[float, float]:
    """
    Calculate position to center text in bounding box.

    Args:
        bbox: Bounding box (x1, y1, x2, y2)
        text: Text to center
        font: Font to use for sizing
        draw: ImageDraw object for text metrics

    Returns:
        (x, y) position for top-left of text
    """
    x1, y1, x2, y2 = bbox
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    text_x = x1 + ((x2 - x1) - (right - left)) / 2 - left
    text_y = y1 + ((y2 - y1) - (bottom - top)) / 2 - top
    return text_x, text_y
