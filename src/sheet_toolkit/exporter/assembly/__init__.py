"""
Module: exporter.assembly

Purpose:
    Turn export payloads into page-agnostic block trees.

Key Functions:
    - assemble(): Dispatch on payload type
    - assemble_detail(), assemble_price_list(), assemble_group_detail()
    - split_description(), clean_html(): Rich-text handling
"""

from .assembler import (
    assemble,
    assemble_detail,
    assemble_price_list,
    assemble_group_detail,
    TABLE_HEADER_CELLS,
)
from .html import split_description, clean_html, DescriptionFragment

__all__ = [
    "assemble",
    "assemble_detail",
    "assemble_price_list",
    "assemble_group_detail",
    "TABLE_HEADER_CELLS",
    "split_description",
    "clean_html",
    "DescriptionFragment",
]
