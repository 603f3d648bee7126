import base64
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import sheet_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from sheet_toolkit.core.models import Block, BlockRole, BreakPolicy, PageGeometry  # noqa: E402


# Common test fixtures
@pytest.fixture
def geometry():
    """1100px pages with 50px margins: 1000px of usable body."""
    return PageGeometry(
        page_width_px=800,
        page_height_px=1100,
        margin_top_px=50,
        margin_bottom_px=50,
        margin_left_px=50,
        margin_right_px=50,
        top_tolerance_px=50,
    )


@pytest.fixture
def stack():
    """
    Factory stacking blocks from a top offset, like a laid-out column.

    Each entry is (id, height) or (id, height, dict of Block kwargs).
    """
    def _stack(entries, top=50, gap=0):
        blocks = []
        y = top
        for entry in entries:
            block_id, height = entry[0], entry[1]
            kwargs = entry[2] if len(entry) > 2 else {}
            kwargs.setdefault("role", BlockRole.CONTENT)
            blocks.append(Block(id=block_id, top_px=y, height_px=height, **kwargs))
            y += height + gap
        return blocks
    return _stack


@pytest.fixture
def forced():
    """Block kwargs for a forced-break section title."""
    return {"role": BlockRole.SECTION_TITLE, "break_policy": BreakPolicy.FORCE_NEW_PAGE}


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="red")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def png_data_uri():
    """A small blue PNG as a base64 data URI."""
    buf = io.BytesIO()
    Image.new("RGB", (40, 30), color="blue").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
