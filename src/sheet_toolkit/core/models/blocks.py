"""
Module: blocks

Purpose:
    Provides the Block dataclass - the atomic, unsplittable unit of a
    composed document. Blocks are created unmeasured by the assembler,
    receive top/height from the measurer, and are shifted or interleaved
    with synthesized spacers by the planner.

Key Classes:
    - BlockRole: What part a block plays in the document
    - BreakPolicy: How a block may move across page boundaries
    - Block: Immutable block with optional measured geometry

Key Functions:
    - Block.measured(top, height): Copy with geometry attached
    - Block.shifted(dy): Copy moved down by dy pixels
    - Block.spacer(id, top, height): Synthesize a spacer block
    - Block.to_dict(): Serialize for debugging/JSON

Dependencies:
    - dataclasses (std)
    - core.models.content: BlockContent

Used By:
    - exporter.assembly: Creates blocks
    - exporter.layout.measurer / planner
    - exporter.surface: Draws blocks
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from .content import BlockContent


class BlockRole(str, Enum):
    """Role of a block in the logical document."""

    CONTENT = "content"
    SECTION_TITLE = "section-title"
    FORCED_BREAK_ANCHOR = "forced-break-anchor"
    REPEATABLE_HEADER = "repeatable-header"
    SPACER = "spacer"  # Synthesized by the planner only


class BreakPolicy(str, Enum):
    """Page-break policy of a block."""

    ALLOW = "allow"
    FORCE_NEW_PAGE = "force-new-page-unless-at-top"


@dataclass(frozen=True, slots=True)
class Block:
    """
    Atomic unit of a composed document.

    Geometry is in CSS pixels relative to the document's top-left origin.
    ``top_px`` and ``height_px`` are None until the block is measured.

    Attributes:
        id: Stable identity for diffing and debugging
        role: BlockRole
        content: What to draw (None for spacers and anchors)
        break_policy: BreakPolicy
        top_px: Measured top (document space)
        height_px: Measured height
        row_index: 0-based data row number for table rows, else None

    Invariants:
        - top_px >= 0 and height_px >= 0 when set
        - spacers carry no content

    Example:
        >>> b = Block("desc-0", BlockRole.CONTENT).measured(300, 40)
        >>> b.bottom_px
        340
    """

    id: str
    role: BlockRole
    content: Optional[BlockContent] = None
    break_policy: BreakPolicy = BreakPolicy.ALLOW
    top_px: Optional[float] = None
    height_px: Optional[float] = None
    row_index: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate block on construction."""
        if not self.id:
            raise ValueError("Block id must be non-empty")
        if self.top_px is not None and self.top_px < 0:
            raise ValueError(f"top_px must be >= 0: {self.top_px}")
        if self.height_px is not None and self.height_px < 0:
            raise ValueError(f"height_px must be >= 0: {self.height_px}")
        if self.role is BlockRole.SPACER and self.content is not None:
            raise ValueError("Spacer blocks cannot carry content")

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_measured(self) -> bool:
        """True once both top and height are known."""
        return self.top_px is not None and self.height_px is not None

    @property
    def bottom_px(self) -> float:
        """Bottom edge (top + height). Raises if unmeasured."""
        if not self.is_measured:
            raise ValueError(f"Block {self.id} has not been measured")
        return self.top_px + self.height_px

    @property
    def is_spacer(self) -> bool:
        return self.role is BlockRole.SPACER

    @property
    def forces_new_page(self) -> bool:
        return self.break_policy is BreakPolicy.FORCE_NEW_PAGE

    @property
    def image_urls(self) -> tuple[str, ...]:
        """Image references this block needs settled before drawing."""
        if self.content is None:
            return ()
        return self.content.image_urls

    # ─────────────────────────────────────────────────────────────────────────
    # Copies
    # ─────────────────────────────────────────────────────────────────────────

    def measured(self, top_px: float, height_px: float) -> "Block":
        """Return a copy with measured geometry attached."""
        return replace(self, top_px=top_px, height_px=height_px)

    def shifted(self, dy: float) -> "Block":
        """Return a copy moved down by ``dy`` pixels."""
        if not self.is_measured:
            raise ValueError(f"Cannot shift unmeasured block {self.id}")
        if dy == 0:
            return self
        return replace(self, top_px=self.top_px + dy)

    @classmethod
    def spacer(cls, block_id: str, top_px: float, height_px: float) -> "Block":
        """Synthesize a spacer occupying [top_px, top_px + height_px)."""
        return cls(
            id=block_id,
            role=BlockRole.SPACER,
            top_px=top_px,
            height_px=height_px,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize geometry and identity (content is summarized by type).

        Example:
            >>> Block("h", BlockRole.CONTENT).measured(0, 10).to_dict()["height_px"]
            10
        """
        data: Dict[str, Any] = {
            "id": self.id,
            "role": self.role.value,
            "break_policy": self.break_policy.value,
            "top_px": self.top_px,
            "height_px": self.height_px,
        }
        if self.row_index is not None:
            data["row_index"] = self.row_index
        if self.content is not None:
            data["content_type"] = type(self.content).__name__
        return data
