"""
conftest.py

Test configuration for redpaper tests.

Defines Pytest fixtures for supplying test data to tests across the entire
test suite. Fixtures used within only a single module are defined
directly in that module. Test images are generated with Pillow rather than
kept in the repository so every test gets exactly the dimensions it needs.
"""

import io
import unittest.mock
from pathlib import Path

import pytest
import requests
from PIL import Image

from redpaper.cli_utils import console


def make_image(width: int = 1920, height: int = 1080, format: str = "JPEG") -> bytes:
    """Return the bytes of a blank image of the given size and format."""

    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(40, 90, 160)).save(buffer, format=format)
    return buffer.getvalue()


def fake_response(content=b"", status_code: int = 200, url: str = "") -> unittest.mock.Mock:
    """
    A mocked requests.Response. Bytes content is also exposed as text so the same helper
    serves listing json and image data.
    """

    response = unittest.mock.create_autospec(requests.Response, instance=True)

    if isinstance(content, str):
        response.text = content
        response.content = content.encode()
    else:
        response.content = content
        response.text = content.decode("latin-1")

    response.status_code = status_code
    response.url = url

    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")

    return response


@pytest.fixture
def image_bytes():
    """Factory fixture: image_bytes(width, height, format) -> bytes"""

    return make_image


@pytest.fixture
def test_image(tmp_path) -> Path:
    """
    Returns a Path object pointing to a 1920x1080 jpeg in a temporary directory.
    """

    path = tmp_path / "test_data" / "landscape.jpg"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(make_image())
    return path


@pytest.fixture
def output_dir(tmp_path) -> Path:
    """A wallpaper directory that does not exist yet."""

    return tmp_path / "backgrounds"


@pytest.fixture(autouse=True)
def reset_console():
    """--quiet swaps the console file for a junk stream, put stdout back after each test."""

    yield
    console.console.file = None
