"""
Module: exporter.surface

Purpose:
    Off-document rendering surfaces: lay out a block tree to get its
    geometry, then draw the planned tree into one bitmap.

Key Classes:
    - RenderSurface: Abstract surface (context manager)
    - PillowSurface: Pillow implementation
    - ImageLoader: Bounded image loading shared by both phases

Dependencies:
    - PIL: Drawing
    - requests: Remote images

Used By:
    - exporter.layout.measurer
    - exporter.controller
"""

from .base import RenderSurface
from .images import ImageLoader, ImageTimeout, SettleReport
from .pillow_surface import PillowSurface

__all__ = [
    "RenderSurface",
    "PillowSurface",
    "ImageLoader",
    "ImageTimeout",
    "SettleReport",
]
