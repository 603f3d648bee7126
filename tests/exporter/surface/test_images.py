"""
Tests for bounded image loading.
"""

import io
import itertools
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from sheet_toolkit.exporter.surface import ImageLoader
from sheet_toolkit.exporter.surface import images as images_module


def _png_bytes(color="green", size=(20, 10)):
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="PNG")
    return buf.getvalue()


def _session_returning(data):
    response = MagicMock()
    response.iter_content.return_value = [data]
    session = MagicMock()
    session.get.return_value.__enter__.return_value = response
    return session


class TestLocalReferences:
    def test_when_data_uri_then_decoded(self, png_data_uri):
        loader = ImageLoader()

        report = loader.settle([png_data_uri])

        assert report.loaded == [png_data_uri]
        assert loader.get(png_data_uri).size == (40, 30)
        assert loader.get(png_data_uri).mode == "RGBA"

    def test_when_plain_path_then_loaded(self, sample_image):
        loader = ImageLoader()

        report = loader.settle([str(sample_image)])

        assert report.loaded == [str(sample_image)]
        assert loader.get(str(sample_image)).size == (200, 100)

    def test_when_file_url_then_loaded(self, sample_image):
        url = sample_image.as_uri()
        loader = ImageLoader()

        loader.settle([url])

        assert loader.get(url) is not None

    def test_when_file_missing_then_failed_and_settled(self, tmp_path):
        # Arrange
        missing = str(tmp_path / "nope.png")
        loader = ImageLoader()

        # Act
        report = loader.settle([missing])

        # Assert
        assert report.failed == [missing]
        assert loader.is_settled(missing)
        assert loader.get(missing) is None

    def test_when_bytes_not_an_image_then_failed(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        loader = ImageLoader()

        report = loader.settle([str(bad)])

        assert report.failed == [str(bad)]

    def test_when_duplicate_references_then_loaded_once(self, png_data_uri):
        loader = ImageLoader()

        report = loader.settle([png_data_uri, png_data_uri])

        assert report.settled_count == 1


class TestRemoteReferences:
    def test_when_http_ok_then_loaded_through_session(self):
        # Arrange
        session = _session_returning(_png_bytes())
        loader = ImageLoader(timeout_s=3, session=session)

        # Act
        report = loader.settle(["https://example.com/a.png"])

        # Assert
        assert report.loaded == ["https://example.com/a.png"]
        args, kwargs = session.get.call_args
        assert kwargs["stream"] is True
        assert kwargs["timeout"] == 3

    def test_when_http_times_out_then_recorded_as_timed_out(self):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")
        loader = ImageLoader(session=session)

        report = loader.settle(["https://example.com/slow.png"])

        assert report.timed_out == ["https://example.com/slow.png"]
        assert loader.get("https://example.com/slow.png") is None

    def test_when_http_error_status_then_failed(self):
        session = _session_returning(b"")
        response = session.get.return_value.__enter__.return_value
        response.raise_for_status.side_effect = requests.HTTPError("404")
        loader = ImageLoader(session=session)

        report = loader.settle(["https://example.com/404.png"])

        assert report.failed == ["https://example.com/404.png"]

    def test_when_cached_then_not_fetched_again(self):
        session = _session_returning(_png_bytes())
        loader = ImageLoader(session=session)

        loader.settle(["https://example.com/a.png"])
        report = loader.settle(["https://example.com/a.png"])

        assert session.get.call_count == 1
        assert report.loaded == ["https://example.com/a.png"]

    def test_when_settle_budget_exhausted_then_rest_timed_out_without_fetch(self, monkeypatch):
        # Arrange: clock jumps past the deadline after it is computed
        ticks = itertools.chain([0.0], itertools.repeat(100.0))
        monkeypatch.setattr(images_module.time, "monotonic", lambda: next(ticks))
        session = _session_returning(_png_bytes())
        loader = ImageLoader(settle_timeout_s=30, session=session)

        # Act
        report = loader.settle(["https://example.com/a.png", "https://example.com/b.png"])

        # Assert
        assert report.timed_out == ["https://example.com/a.png", "https://example.com/b.png"]
        session.get.assert_not_called()

    def test_when_closed_then_injected_session_left_open(self):
        session = _session_returning(_png_bytes())
        loader = ImageLoader(session=session)
        loader.settle(["https://example.com/a.png"])

        loader.close()

        session.close.assert_not_called()
        assert not loader.is_settled("https://example.com/a.png")


@pytest.mark.parametrize("uri", ["data:image/png;base64,", "data:,"])
def test_when_data_uri_empty_then_failed(uri):
    loader = ImageLoader()

    report = loader.settle([uri])

    assert report.failed == [uri]
