"""
Tests for block tree assembly.
"""

from datetime import date

import pytest

from sheet_toolkit.core.errors import AssemblyError
from sheet_toolkit.core.models import (
    BlockRole,
    BreakPolicy,
    DetailPayload,
    DocumentHeaderContent,
    GroupPayload,
    ItemPayload,
    ListPayload,
    PriceTier,
    TextStyle,
)
from sheet_toolkit.exporter.assembly import (
    TABLE_HEADER_CELLS,
    assemble,
    assemble_detail,
    assemble_group_detail,
    assemble_price_list,
)
from sheet_toolkit.exporter.config import ExportConfig

EXPORT_DATE = date(2026, 10, 19)


@pytest.fixture
def item():
    return ItemPayload(
        name="Sensor Kit",
        price=100_000,
        discount=80_000,
        quantity="2 pcs",
        description="<p>Paragraf satu</p><p>Paragraf dua</p>",
        short_description="<b>Ringkas</b>",
        image="https://example.com/main.png",
        additional_images=("a.png", "b.png", "c.png"),
    )


@pytest.fixture
def config():
    return ExportConfig(brand_name="Toko Maju")


class TestAssembleDetail:
    def test_when_item_complete_then_blocks_in_document_order(self, item, config):
        blocks = assemble_detail(item, config, export_date=EXPORT_DATE)

        assert [b.id for b in blocks] == [
            "header", "summary", "desc-0", "desc-1",
            "attachments-title", "attachments-0", "attachments-1",
        ]
        assert not any(b.is_measured for b in blocks)

    def test_when_assembled_then_header_carries_brand_title_and_date(self, item, config):
        header = assemble_detail(item, config, export_date=EXPORT_DATE)[0]

        assert header.content == DocumentHeaderContent(
            document_title="DETAIL PRODUK",
            date_label="19 Oktober 2026",
            brand_name="Toko Maju",
            heading="Sensor Kit",
        )

    def test_when_discount_active_then_summary_shows_discount(self, item, config):
        summary = assemble_detail(item, config, export_date=EXPORT_DATE)[1].content

        assert summary.price_label == "Rp 80.000"
        assert summary.original_price_label == "Rp 100.000"
        assert summary.discount_label == "DISKON 20%"
        assert summary.quantity_label == "Qty / Satuan: 2 pcs"
        assert summary.short_description == "Ringkas"
        assert summary.image_url == "https://example.com/main.png"

    def test_when_no_discount_then_plain_price(self, config):
        summary = assemble_detail(ItemPayload("Kabel", 15_000), config)[1].content

        assert summary.price_label == "Rp 15.000"
        assert summary.original_price_label is None
        assert summary.discount_label is None
        assert summary.quantity_label is None

    def test_when_attachments_then_title_forces_break_and_images_paired(self, item, config):
        blocks = {b.id: b for b in assemble_detail(item, config)}

        title = blocks["attachments-title"]
        assert title.role is BlockRole.SECTION_TITLE
        assert title.break_policy is BreakPolicy.FORCE_NEW_PAGE
        assert title.content.text == "Lampiran"
        assert blocks["attachments-0"].content.urls == ("a.png", "b.png")
        assert blocks["attachments-1"].content.urls == ("c.png",)

    def test_when_description_split_then_first_fragment_has_rule(self, item, config):
        blocks = {b.id: b for b in assemble_detail(item, config)}

        assert blocks["desc-0"].content.rule_above
        assert not blocks["desc-1"].content.rule_above

    def test_when_no_attachments_then_no_forced_title(self, config):
        blocks = assemble_detail(ItemPayload("Kabel", 15_000, description="x"), config)

        assert [b.id for b in blocks] == ["header", "summary", "desc-0"]
        assert not any(b.forces_new_page for b in blocks)

    def test_when_price_tiers_then_cards_replace_single_price(self, config):
        # Arrange
        item = ItemPayload("Jasa", 0, prices=(
            PriceTier("Basic", 100_000),
            PriceTier("Pro", 300_000, 250_000, "<p>Prioritas</p>"),
            PriceTier("Ultimate", 500_000),
        ))

        # Act
        blocks = {b.id: b for b in assemble_detail(item, config)}

        # Assert
        assert blocks["summary"].content.price_label is None
        first, second = blocks["tiers-0"].content.cards
        assert first.price_label == "Rp 100.000"
        assert second.price_label == "Rp 250.000"
        assert second.original_price_label == "Rp 300.000"
        assert second.description == "Prioritas"
        assert len(blocks["tiers-1"].content.cards) == 1


class TestAssemblePriceList:
    def test_when_list_then_repeatable_headers_and_indexed_rows(self, config):
        # Arrange
        items = [ItemPayload("Kabel", 15_000, quantity="1 m"), ItemPayload("Saklar", 20_000, 18_000)]

        # Act
        blocks = assemble_price_list(GroupPayload("Listrik"), items, config)

        # Assert
        assert [b.id for b in blocks] == ["header", "group-title", "column-header", "row-0", "row-1"]
        assert blocks[1].role is BlockRole.REPEATABLE_HEADER
        assert blocks[1].content.text == "LISTRIK"
        assert blocks[2].content.cells == TABLE_HEADER_CELLS
        assert blocks[2].content.is_header
        assert [b.row_index for b in blocks[3:]] == [0, 1]
        assert blocks[0].content.document_title == "DAFTAR HARGA"

    def test_when_row_built_then_cells_follow_column_order(self, config):
        items = [ItemPayload("Kabel", 15_000), ItemPayload("Saklar", 20_000, 18_000)]

        rows = assemble_price_list(GroupPayload("Listrik"), items, config)[3:]

        assert rows[0].content.cells == ("1", "", "Kabel", "-", "Rp 15.000")
        assert rows[1].content.cells == ("2", "", "Saklar", "-", "Rp 18.000")
        assert rows[1].content.original_price_label == "Rp 20.000"


class TestAssembleGroupDetail:
    def test_when_items_then_numbered_sections_with_unique_ids(self, config):
        items = [ItemPayload("A", 1), ItemPayload("B", 2)]

        blocks = assemble_group_detail(GroupPayload("Paket"), items, config)
        ids = [b.id for b in blocks]

        assert ids == ["header", "item-0-title", "item-0-summary", "item-1-title", "item-1-summary"]
        assert blocks[1].content.text == "1. A"
        assert blocks[1].content.style is TextStyle.TITLE
        assert blocks[0].content.document_title == "PAKET"

    def test_when_items_start_new_page_then_anchor_before_each_later_item(self):
        config = ExportConfig(item_starts_new_page=True)
        items = [ItemPayload("A", 1), ItemPayload("B", 2), ItemPayload("C", 3)]

        blocks = assemble_group_detail(GroupPayload("Paket"), items, config)
        anchors = [b for b in blocks if b.role is BlockRole.FORCED_BREAK_ANCHOR]

        assert [a.id for a in anchors] == ["item-1-anchor", "item-2-anchor"]
        assert all(a.forces_new_page and a.content is None for a in anchors)


class TestAssembleDispatch:
    def test_when_detail_payload_then_detail_tree(self, item, config):
        blocks = assemble(DetailPayload(item), config)

        assert blocks[1].id == "summary"

    def test_when_detailed_list_then_group_detail_tree(self, item, config):
        blocks = assemble(ListPayload(GroupPayload("G"), (item,), detailed=True), config)

        assert blocks[1].id == "item-0-title"

    def test_when_list_empty_then_assembly_error(self, config):
        with pytest.raises(AssemblyError, match="no items"):
            assemble(ListPayload(GroupPayload("G"), ()), config)

    def test_when_payload_unknown_then_assembly_error(self, config):
        with pytest.raises(AssemblyError, match="Unsupported"):
            assemble({"name": "x"}, config)
