"""
Module: exporter.layout.planner

Purpose:
    Decide where page breaks fall in a measured block sequence. Blocks
    are never split: a block that would cross the bottom limit of its
    page is pushed to the next page's top margin by a synthesized spacer.

Key Functions:
    - plan_breaks(): Main planning function

Algorithm:
    Single forward pass (a fold) over blocks sorted by measured top:
    1. Carry ``offset`` = total height inserted so far; a block's
       adjusted top is ``top_px + offset``.
    2. Group the block with what must stay beside it: a run of
       repeatable headers stays with the block that follows it.
    3. page = floor(top / H); limit = (page+1)*H - margin_bottom
       force = FORCE_NEW_PAGE and (top mod H) > margin_top + tolerance
       Break when bottom > limit (strictly) or force.
    4. On break insert a spacer of (page+1)*H + margin_top - top, numbered
       after any spacers already in the input. If the pushed block is a
       table row, re-emit the header cluster before it.
    5. Blocks taller than one page body are never pushed by the overflow
       rule (they would overflow anywhere); they are reported instead.

    Planning an already-planned tree inserts nothing.

Dependencies:
    - core.models: Block, PageGeometry, Document

Used By:
    - exporter.controller: Main export controller
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sheet_toolkit.core.models import Block, BlockRole, Document, PageGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderCluster:
    """
    Repeatable header template captured from the measured tree.

    Attributes:
        blocks: Header blocks in order (measured)
        offsets: Each block's top relative to the first header's top
        advance: Distance from the first header's top to the top of the
            block that follows the cluster
    """

    blocks: tuple[Block, ...]
    offsets: tuple[float, ...]
    advance: float

    def place_at(self, top: float, page_number: int) -> List[Block]:
        """Clone the cluster so its first block starts at ``top``."""
        return [
            Block(
                id=f"{block.id}~p{page_number}",
                role=BlockRole.REPEATABLE_HEADER,
                content=block.content,
                top_px=top + offset,
                height_px=block.height_px,
            )
            for block, offset in zip(self.blocks, self.offsets)
        ]


@dataclass(frozen=True)
class PlanResult:
    """
    Planner output.

    Attributes:
        blocks: Original blocks (shifted) interleaved with spacers and
            re-emitted header clusters
        geometry: Geometry the plan was made against
        spacers_inserted: Number of spacers added by this pass
        headers_inserted: Number of header clusters re-emitted
        oversized_block_ids: Blocks taller than one page body
        warnings: Human-readable warnings
    """

    blocks: tuple[Block, ...]
    geometry: PageGeometry
    spacers_inserted: int = 0
    headers_inserted: int = 0
    oversized_block_ids: tuple[str, ...] = ()
    warnings: list[str] = field(default_factory=list)

    @property
    def document(self) -> Document:
        return Document(blocks=self.blocks, geometry=self.geometry)

    @property
    def page_count(self) -> int:
        return self.document.page_count


def plan_breaks(
    blocks: List[Block],
    geometry: PageGeometry,
) -> PlanResult:
    """
    Insert spacers (and repeated table headers) so no block straddles a page.

    Args:
        blocks: Measured blocks in document order
        geometry: Page geometry in the same pixel space as the blocks

    Returns:
        PlanResult with the new block sequence

    Raises:
        ValueError: If any block is unmeasured

    Example:
        >>> result = plan_breaks(measured, PageGeometry(page_height_px=1100,
        ...                      margin_top_px=50, margin_bottom_px=50))
        >>> result.spacers_inserted
        1
    """
    for block in blocks:
        if not block.is_measured:
            raise ValueError(f"Cannot plan unmeasured block {block.id}")

    ordered = sorted(blocks, key=lambda b: b.top_px)  # stable for equal tops
    cluster = _capture_header_cluster(ordered)
    existing_spacers = sum(1 for b in ordered if b.is_spacer)

    planned: List[Block] = []
    warnings: List[str] = []
    oversized: List[str] = []
    offset = 0.0
    spacers = 0
    headers = 0
    body = geometry.body_height_px
    H = geometry.page_height_px

    i = 0
    while i < len(ordered):
        group = _get_atomic_group(i, ordered)
        first, last = group[0], group[-1]

        if first.is_spacer:
            # Already planned; keep as-is
            planned.append(first.shifted(offset))
            i += 1
            continue

        top = first.top_px + offset
        bottom = last.bottom_px + offset
        page_index = geometry.page_index_of(top)
        limit = geometry.page_bottom_limit(page_index)
        top_within_page = top - page_index * H

        force_break = (
            first.forces_new_page
            and top_within_page > geometry.margin_top_px + geometry.top_tolerance_px
        )
        overflows = bottom > limit
        is_oversized = (bottom - top) > body

        if is_oversized and overflows:
            oversized.extend(b.id for b in group)
            message = (
                f"Block {first.id} is {bottom - top:.0f}px tall, page body is "
                f"{body}px; it will overflow page {page_index + 1}"
            )
            warnings.append(message)
            logger.warning(message)
            overflows = False

        if overflows or force_break:
            next_top = geometry.next_page_top(page_index)
            spacer_height = next_top - top
            spacers += 1
            spacer_id = f"spacer-{existing_spacers + spacers}"
            planned.append(Block.spacer(spacer_id, top, spacer_height))
            offset += spacer_height
            logger.debug(
                f"Break before {first.id} ({'forced' if force_break else 'overflow'}): "
                f"spacer {spacer_height:.0f}px to page {page_index + 2}"
            )

            if first.row_index is not None and cluster is not None:
                clones = cluster.place_at(next_top, page_index + 2)
                planned.extend(clones)
                offset += cluster.advance
                headers += 1

        planned.extend(b.shifted(offset) for b in group)
        i += len(group)

    result = PlanResult(
        blocks=tuple(planned),
        geometry=geometry,
        spacers_inserted=spacers,
        headers_inserted=headers,
        oversized_block_ids=tuple(oversized),
        warnings=warnings,
    )
    logger.info(
        f"Planned {len(blocks)} blocks onto {result.page_count} pages "
        f"({spacers} spacers, {headers} repeated headers)"
    )
    return result


def _get_atomic_group(start_idx: int, blocks: List[Block]) -> List[Block]:
    """
    Get the blocks that must move together starting at ``start_idx``.

    A run of repeatable headers grabs the next non-header block, so a
    header is never left alone at the bottom of a page. Spacers never
    join a group.

    Args:
        start_idx: Current index in blocks
        blocks: Full ordered list

    Returns:
        List of blocks that must stay together
    """
    group = [blocks[start_idx]]
    current_idx = start_idx

    while current_idx + 1 < len(blocks):
        current = blocks[current_idx]
        next_block = blocks[current_idx + 1]

        if current.role is not BlockRole.REPEATABLE_HEADER or next_block.is_spacer:
            break
        if next_block.forces_new_page:
            # Next block leaves the page anyway; don't drag headers along
            break

        group.append(next_block)
        current_idx += 1

    return group


def _capture_header_cluster(blocks: List[Block]) -> Optional[HeaderCluster]:
    """
    Capture the first contiguous run of repeatable headers as a template.

    Returns None when the tree has no repeatable headers or the run is
    not followed by another block (nothing to measure the advance from).
    """
    start = next(
        (i for i, b in enumerate(blocks) if b.role is BlockRole.REPEATABLE_HEADER),
        None,
    )
    if start is None:
        return None

    end = start
    while end < len(blocks) and blocks[end].role is BlockRole.REPEATABLE_HEADER:
        end += 1

    run = blocks[start:end]
    origin = run[0].top_px
    if end < len(blocks):
        advance = blocks[end].top_px - origin
    else:
        advance = run[-1].bottom_px - origin

    return HeaderCluster(
        blocks=tuple(run),
        offsets=tuple(b.top_px - origin for b in run),
        advance=advance,
    )
