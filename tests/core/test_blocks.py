"""
Unit tests for Block.
"""

import pytest

from sheet_toolkit.core.models import Block, BlockRole, BreakPolicy, ImageRowContent, TextContent


class TestBlockCreation:
    def test_when_created_unmeasured_then_not_measured(self):
        block = Block("desc-0", BlockRole.CONTENT, TextContent("x"))

        assert not block.is_measured
        assert block.break_policy is BreakPolicy.ALLOW

    def test_when_bottom_of_unmeasured_block_then_raises(self):
        with pytest.raises(ValueError, match="not been measured"):
            Block("x", BlockRole.CONTENT).bottom_px

    @pytest.mark.parametrize("kwargs", [
        {"id": ""},
        {"top_px": -1, "height_px": 10},
        {"top_px": 0, "height_px": -5},
    ])
    def test_when_invalid_then_raises(self, kwargs):
        values = {"id": "x", "role": BlockRole.CONTENT, **kwargs}

        with pytest.raises(ValueError):
            Block(**values)

    def test_when_spacer_given_content_then_raises(self):
        with pytest.raises(ValueError, match="Spacer"):
            Block("s", BlockRole.SPACER, TextContent("no"))

    def test_blocks_are_immutable(self):
        block = Block("x", BlockRole.CONTENT)

        with pytest.raises(AttributeError):
            block.top_px = 5


class TestBlockCopies:
    def test_when_measured_then_copy_has_geometry(self):
        original = Block("x", BlockRole.CONTENT)

        measured = original.measured(300, 40)

        assert measured.bottom_px == 340
        assert original.top_px is None

    def test_when_shifted_then_moved_down(self):
        block = Block("x", BlockRole.CONTENT).measured(100, 20)

        assert block.shifted(50).top_px == 150
        assert block.shifted(0) is block

    def test_when_shifting_unmeasured_then_raises(self):
        with pytest.raises(ValueError):
            Block("x", BlockRole.CONTENT).shifted(10)

    def test_spacer_factory(self):
        spacer = Block.spacer("spacer-1", 900, 250)

        assert spacer.is_spacer
        assert spacer.content is None
        assert spacer.bottom_px == 1150


class TestBlockProperties:
    def test_image_urls_come_from_content(self):
        block = Block("a", BlockRole.CONTENT, ImageRowContent(urls=("x.png", "y.png")))

        assert block.image_urls == ("x.png", "y.png")
        assert Block("s", BlockRole.SPACER).image_urls == ()

    def test_forces_new_page(self):
        block = Block("t", BlockRole.SECTION_TITLE, break_policy=BreakPolicy.FORCE_NEW_PAGE)

        assert block.forces_new_page

    def test_to_dict(self):
        block = Block("row-3", BlockRole.CONTENT, TextContent("x"), row_index=3).measured(10, 20)

        data = block.to_dict()

        assert data == {
            "id": "row-3",
            "role": "content",
            "break_policy": "allow",
            "top_px": 10,
            "height_px": 20,
            "row_index": 3,
            "content_type": "TextContent",
        }
