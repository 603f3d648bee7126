"""
Module: exporter.assembly.assembler

Purpose:
    Build the logical block tree for an export payload. Pure data -> tree
    transformation: no page knowledge, no measuring, no image loading.

Key Functions:
    - assemble_detail(): Single-item detail document
    - assemble_price_list(): Group header + one block per data row
    - assemble_group_detail(): Every item of a group as a detail section
    - assemble(): Dispatch on payload type

Block order (detail):
    [header, summary, desc-0 .. desc-n, tiers-0 .., attachments-title(force),
     attachments-0 ..]
    Attachment images are chunked two per row.

Block order (price list):
    [header, group-title(rh), column-header(rh), row-0 .. row-n]
    rh = repeatable-header, re-emitted by the planner after each break.

Dependencies:
    - core.models: Block, contents, payloads
    - exporter.assembly.html: Description splitting

Used By:
    - exporter.controller
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from sheet_toolkit.core.errors import AssemblyError
from sheet_toolkit.core.models import (
    Block,
    BlockRole,
    BreakPolicy,
    DetailPayload,
    DocumentHeaderContent,
    ExportPayload,
    GroupPayload,
    ImageRowContent,
    ItemPayload,
    ItemSummaryContent,
    ListPayload,
    PriceTier,
    PriceTierCard,
    PriceTierRowContent,
    TableRowContent,
    TextContent,
    TextStyle,
)
from sheet_toolkit.core.utils import format_date_id, format_rupiah
from sheet_toolkit.exporter.config import ExportConfig

from .html import clean_html, split_description

logger = logging.getLogger(__name__)

ATTACHMENT_COLUMNS = 2
TIER_COLUMNS = 2
TABLE_HEADER_CELLS = ("No", "Foto", "Nama Barang & Deskripsi", "Qty", "Harga")


def _chunk(values: Sequence, size: int) -> List[tuple]:
    """Split into consecutive tuples of at most ``size`` items."""
    return [tuple(values[i:i + size]) for i in range(0, len(values), size)]


def _header_block(
    config: ExportConfig,
    document_title: str,
    export_date: Optional[date],
    heading: Optional[str] = None,
) -> Block:
    return Block(
        id="header",
        role=BlockRole.CONTENT,
        content=DocumentHeaderContent(
            document_title=document_title,
            date_label=format_date_id(export_date),
            brand_name=config.brand_name,
            brand_tagline=config.brand_tagline,
            logo_url=config.logo_path,
            heading=heading,
        ),
    )


def _summary_content(item: ItemPayload) -> ItemSummaryContent:
    """Image + price/discount + quantity column for one item."""
    short = clean_html(item.short_description).replace("\n", " ").strip() or None
    quantity = f"Qty / Satuan: {item.quantity}" if item.quantity else None

    if item.prices:
        # Tier cards carry the prices
        return ItemSummaryContent(
            image_url=item.image,
            quantity_label=quantity,
            short_description=short,
        )

    return ItemSummaryContent(
        image_url=item.image,
        price_label=format_rupiah(item.final_price),
        original_price_label=format_rupiah(item.price) if item.has_discount else None,
        discount_label=f"DISKON {item.discount_percent}%" if item.has_discount else None,
        quantity_label=quantity,
        short_description=short,
    )


def _tier_card(tier: PriceTier) -> PriceTierCard:
    return PriceTierCard(
        name=tier.name,
        price_label=format_rupiah(tier.final_price),
        original_price_label=format_rupiah(tier.price) if tier.has_discount else None,
        description=clean_html(tier.description),
    )


def _item_blocks(item: ItemPayload, config: ExportConfig, prefix: str = "") -> List[Block]:
    """
    Body blocks for one item (everything below the masthead).

    Args:
        item: Validated item
        config: Export configuration (titles)
        prefix: Id prefix keeping ids unique across items
    """
    blocks: List[Block] = [
        Block(id=f"{prefix}summary", role=BlockRole.CONTENT, content=_summary_content(item)),
    ]

    fragments = split_description(item.description)
    for i, fragment in enumerate(fragments):
        blocks.append(Block(
            id=f"{prefix}desc-{i}",
            role=BlockRole.CONTENT,
            content=TextContent(fragment.text, fragment.style, rule_above=(i == 0)),
        ))

    for i, tiers in enumerate(_chunk(item.prices, TIER_COLUMNS)):
        blocks.append(Block(
            id=f"{prefix}tiers-{i}",
            role=BlockRole.CONTENT,
            content=PriceTierRowContent(
                cards=tuple(_tier_card(t) for t in tiers),
                columns=TIER_COLUMNS,
            ),
        ))

    if item.additional_images:
        blocks.append(Block(
            id=f"{prefix}attachments-title",
            role=BlockRole.SECTION_TITLE,
            content=TextContent(config.attachments_title, TextStyle.TITLE),
            break_policy=BreakPolicy.FORCE_NEW_PAGE,
        ))
        for i, urls in enumerate(_chunk(item.additional_images, ATTACHMENT_COLUMNS)):
            blocks.append(Block(
                id=f"{prefix}attachments-{i}",
                role=BlockRole.CONTENT,
                content=ImageRowContent(urls=urls, columns=ATTACHMENT_COLUMNS),
            ))

    return blocks


def assemble_detail(
    item: ItemPayload,
    config: ExportConfig,
    *,
    export_date: Optional[date] = None,
) -> List[Block]:
    """
    Create the block tree for a single-item detail document.

    Args:
        item: Validated item payload
        config: Export configuration
        export_date: Date printed in the masthead (default: today)

    Returns:
        Unmeasured blocks in document order

    Example:
        >>> blocks = assemble_detail(item, ExportConfig())
        >>> [b.id for b in blocks][:2]
        ['header', 'summary']
    """
    blocks = [_header_block(config, config.detail_title, export_date, heading=item.name)]
    blocks.extend(_item_blocks(item, config))
    logger.debug(f"Assembled {len(blocks)} blocks for detail of {item.name!r}")
    return blocks


def _row_content(index: int, item: ItemPayload) -> TableRowContent:
    return TableRowContent(
        cells=(
            str(index + 1),
            "",
            item.name,
            item.quantity or "-",
            format_rupiah(item.final_price),
        ),
        image_url=item.image,
        description=clean_html(item.description),
        original_price_label=format_rupiah(item.price) if item.has_discount else None,
    )


def assemble_price_list(
    group: GroupPayload,
    items: Sequence[ItemPayload],
    config: ExportConfig,
    *,
    export_date: Optional[date] = None,
) -> List[Block]:
    """
    Create the block tree for a price-list table.

    The group title and column header are REPEATABLE_HEADER blocks; every
    data row carries its ``row_index`` so the planner can tell rows apart
    from other content when it inserts a break.

    Args:
        group: Group metadata
        items: Items in table order
        config: Export configuration
        export_date: Date printed in the masthead (default: today)

    Returns:
        Unmeasured blocks in document order
    """
    blocks: List[Block] = [_header_block(config, config.list_title, export_date)]
    blocks.append(Block(
        id="group-title",
        role=BlockRole.REPEATABLE_HEADER,
        content=TextContent(group.name.upper(), TextStyle.TITLE),
    ))
    blocks.append(Block(
        id="column-header",
        role=BlockRole.REPEATABLE_HEADER,
        content=TableRowContent(cells=TABLE_HEADER_CELLS, is_header=True),
    ))
    for i, item in enumerate(items):
        blocks.append(Block(
            id=f"row-{i}",
            role=BlockRole.CONTENT,
            content=_row_content(i, item),
            row_index=i,
        ))
    logger.debug(f"Assembled price list {group.name!r} with {len(items)} rows")
    return blocks


def assemble_group_detail(
    group: GroupPayload,
    items: Sequence[ItemPayload],
    config: ExportConfig,
    *,
    export_date: Optional[date] = None,
) -> List[Block]:
    """
    Create the block tree for a group rendered as numbered detail sections.

    When ``config.item_starts_new_page`` is set, a zero-height
    FORCED_BREAK_ANCHOR precedes every item after the first.
    """
    blocks: List[Block] = [_header_block(config, group.name.upper(), export_date)]
    for i, item in enumerate(items):
        prefix = f"item-{i}-"
        if i > 0 and config.item_starts_new_page:
            blocks.append(Block(
                id=f"{prefix}anchor",
                role=BlockRole.FORCED_BREAK_ANCHOR,
                break_policy=BreakPolicy.FORCE_NEW_PAGE,
            ))
        blocks.append(Block(
            id=f"{prefix}title",
            role=BlockRole.CONTENT,
            content=TextContent(f"{i + 1}. {item.name}", TextStyle.TITLE),
        ))
        blocks.extend(_item_blocks(item, config, prefix=prefix))
    logger.debug(f"Assembled group detail {group.name!r}: {len(items)} items, {len(blocks)} blocks")
    return blocks


def assemble(
    payload: ExportPayload,
    config: ExportConfig,
    *,
    export_date: Optional[date] = None,
) -> List[Block]:
    """
    Assemble any export payload.

    Raises:
        AssemblyError: If the payload type is unknown or a list is empty
    """
    if isinstance(payload, DetailPayload):
        return assemble_detail(payload.item, config, export_date=export_date)
    if isinstance(payload, ListPayload):
        if not payload.items:
            raise AssemblyError(f"Group {payload.group.name!r} has no items to export")
        if payload.detailed:
            return assemble_group_detail(payload.group, payload.items, config, export_date=export_date)
        return assemble_price_list(payload.group, payload.items, config, export_date=export_date)
    raise AssemblyError(f"Unsupported payload type: {type(payload).__name__}")
