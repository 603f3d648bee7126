"""
Core Models Package

Immutable, validated data models shared by every export stage.

All models are frozen dataclasses: stages never mutate a block in
place, they return new blocks. This keeps planning a pure fold over
measured data and lets tests compare trees directly.
"""

from .content import (
    TextStyle,
    TextContent,
    DocumentHeaderContent,
    ItemSummaryContent,
    ImageRowContent,
    PriceTierCard,
    PriceTierRowContent,
    TableRowContent,
    BlockContent,
)
from .blocks import Block, BlockRole, BreakPolicy
from .document import PageGeometry, Page, Document
from .payload import (
    PriceTier,
    ItemPayload,
    GroupPayload,
    DetailPayload,
    ListPayload,
    ExportPayload,
)

__all__ = [
    "TextStyle",
    "TextContent",
    "DocumentHeaderContent",
    "ItemSummaryContent",
    "ImageRowContent",
    "PriceTierCard",
    "PriceTierRowContent",
    "TableRowContent",
    "BlockContent",
    "Block",
    "BlockRole",
    "BreakPolicy",
    "PageGeometry",
    "Page",
    "Document",
    "PriceTier",
    "ItemPayload",
    "GroupPayload",
    "DetailPayload",
    "ListPayload",
    "ExportPayload",
]
