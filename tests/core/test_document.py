"""
Unit tests for PageGeometry and Document.
"""

import pytest

from sheet_toolkit.core.models import Block, BlockRole, Document, ImageRowContent, PageGeometry


class TestPageGeometry:
    def test_defaults_are_a4_at_96_dpi_with_20mm_margins(self):
        g = PageGeometry()

        assert (g.page_width_px, g.page_height_px) == (794, 1123)
        assert g.margin_top_px == 76
        assert g.body_height_px == 1123 - 152

    def test_page_arithmetic(self, geometry):
        assert geometry.page_index_of(1099) == 0
        assert geometry.page_index_of(1100) == 1
        assert geometry.page_bottom_limit(0) == 1050
        assert geometry.next_page_top(0) == 1150

    @pytest.mark.parametrize("total, expected", [(0, 1), (1, 1), (1100, 1), (1101, 2), (3300, 3)])
    def test_page_count_for(self, geometry, total, expected):
        assert geometry.page_count_for(total) == expected

    def test_cover_band_defaults_to_bottom_margin(self, geometry):
        assert geometry.cover_band_px == 50
        assert PageGeometry(margin_bottom_px=76, footer_reserve_px=40).cover_band_px == 40

    @pytest.mark.parametrize("kwargs", [
        {"page_height_px": 0},
        {"margin_top_px": 600, "margin_bottom_px": 600},
        {"margin_left_px": 400, "margin_right_px": 400},
        {"margin_top_px": -1},
        {"top_tolerance_px": -1},
        {"footer_reserve_px": 100},
    ])
    def test_when_invalid_then_raises(self, kwargs):
        with pytest.raises(ValueError):
            PageGeometry(**kwargs)

    def test_pages_for(self, geometry):
        pages = geometry.pages_for(2000)

        assert [p.index for p in pages] == [1, 2]
        assert pages[1].y_start == 1150
        assert pages[1].height == 1000


class TestDocument:
    def test_total_height_includes_bottom_margin(self, geometry, stack):
        doc = Document(tuple(stack([("a", 500), ("b", 200.5)])), geometry)

        assert doc.content_bottom_px == 750.5
        assert doc.total_height_px == 801
        assert doc.page_count == 1

    def test_empty_document_is_one_page(self, geometry):
        doc = Document((), geometry)

        assert doc.total_height_px == 100
        assert doc.page_count == 1

    def test_spacer_count_and_image_urls(self, geometry):
        blocks = (
            Block("img-0", BlockRole.CONTENT, ImageRowContent(("a", "b"))).measured(50, 10),
            Block.spacer("spacer-1", 60, 1090),
            Block("img-1", BlockRole.CONTENT, ImageRowContent(("b", "c"))).measured(1150, 10),
        )
        doc = Document(blocks, geometry)

        assert doc.spacer_count == 1
        assert doc.image_urls() == ("a", "b", "c")
        assert doc.page_count == 2
