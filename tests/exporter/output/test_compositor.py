"""
Tests for page slicing, PDF composition and delivery.
"""

import io

import pytest
from PIL import Image
from pypdf import PdfReader

from sheet_toolkit.core.errors import CompositionError
from sheet_toolkit.exporter.config import ExportConfig
from sheet_toolkit.exporter.output import (
    ExportBlob,
    OutputMode,
    compose_pdf,
    deliver,
    format_page_label,
    page_count_for_raster,
    slice_page,
)


@pytest.fixture
def config():
    return ExportConfig(pixel_ratio=1)


def _raster(config, height_px):
    g = config.geometry
    return Image.new("RGB", (g.page_width_px, height_px), "white")


class TestSlicing:
    @pytest.mark.parametrize("height, expected", [
        (1, 1),
        (1123, 1),
        (1124, 2),
        (2246, 2),
        (2247, 3),
    ])
    def test_page_count_follows_raster_height(self, config, height, expected):
        assert page_count_for_raster(height, config.geometry, 1) == expected

    def test_when_pixel_ratio_two_then_bands_doubled(self, config):
        assert page_count_for_raster(2246 * 2, config.geometry, 2) == 2
        assert page_count_for_raster(2246 * 2 + 1, config.geometry, 2) == 3

    def test_when_slicing_page_two_then_band_offset_by_one_page(self, config):
        # Arrange: paint page 2's first row red
        raster = _raster(config, 2 * 1123)
        raster.paste((255, 0, 0), (0, 1123, raster.width, 1124))

        # Act
        page = slice_page(raster, 2, config.geometry, 1)

        # Assert
        assert page.size == (raster.width, 1123)
        assert page.getpixel((10, 0)) == (255, 0, 0)
        assert page.getpixel((10, 1)) == (255, 255, 255)

    def test_when_last_band_short_then_padded_white(self, config):
        raster = Image.new("RGB", (config.geometry.page_width_px, 1200), "black")

        page = slice_page(raster, 2, config.geometry, 1)

        assert page.height == 1123
        assert page.getpixel((10, 50)) == (0, 0, 0)
        assert page.getpixel((10, 500)) == (255, 255, 255)


class TestComposePdf:
    def test_when_composed_then_one_pdf_page_per_band_with_footer(self, config):
        # Act
        pdf = compose_pdf(_raster(config, 2 * 1123 + 100), config.geometry, config, title="Uji")
        reader = PdfReader(io.BytesIO(pdf))

        # Assert
        assert pdf.startswith(b"%PDF-")
        assert len(reader.pages) == 3
        for i, page in enumerate(reader.pages, start=1):
            text = page.extract_text()
            assert f"Halaman {i} dari 3" in text
            assert "Dokumen ini dibuat secara otomatis oleh sistem." in text

    def test_when_composed_then_page_is_a4_in_points(self, config):
        pdf = compose_pdf(_raster(config, 500), config.geometry, config)
        box = PdfReader(io.BytesIO(pdf)).pages[0].mediabox

        assert float(box.width) == pytest.approx(595.5, abs=0.5)
        assert float(box.height) == pytest.approx(842.25, abs=0.5)

    def test_when_custom_footer_then_used_on_every_page(self):
        config = ExportConfig(pixel_ratio=1, disclaimer="Rahasia", page_label="{page}/{total}")
        pdf = compose_pdf(_raster(config, 1200), config.geometry, config)
        reader = PdfReader(io.BytesIO(pdf))

        texts = [p.extract_text() for p in reader.pages]

        assert "Rahasia" in texts[0] and "1/2" in texts[0]
        assert "2/2" in texts[1]

    def test_when_same_raster_then_identical_pdf(self, config):
        raster = _raster(config, 1500)

        assert compose_pdf(raster, config.geometry, config) == compose_pdf(raster, config.geometry, config)

    def test_when_raster_width_mismatched_then_raises(self, config):
        raster = Image.new("RGB", (100, 100), "white")

        with pytest.raises(CompositionError, match="width"):
            compose_pdf(raster, config.geometry, config)


class TestDeliver:
    def test_when_file_mode_then_written_to_output_dir(self, tmp_path):
        path = deliver(b"%PDF-data", OutputMode.FILE, "Detail-Produk-x.pdf", tmp_path / "out")

        assert path == tmp_path / "out" / "Detail-Produk-x.pdf"
        assert path.read_bytes() == b"%PDF-data"

    def test_when_blob_mode_then_size_metadata(self):
        blob = deliver(b"x" * 2048, OutputMode.BLOB, "a.pdf")

        assert isinstance(blob, ExportBlob)
        assert blob.size == 2048
        assert blob.formatted_size == "2 KB"
        assert blob.to_data_uri().startswith("data:application/pdf;base64,")

    def test_when_bytes_mode_then_bytes_returned(self):
        assert deliver(b"abc", "bytes", "a.pdf") == b"abc"

    def test_when_output_dir_is_a_file_then_composition_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(CompositionError, match="Cannot write"):
            deliver(b"abc", OutputMode.FILE, "a.pdf", blocker)


def test_format_page_label():
    assert format_page_label("Halaman {page} dari {total}", 2, 7) == "Halaman 2 dari 7"
