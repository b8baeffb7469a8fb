"""
Tests for cache.py

Validate that candidates are matched against files saved on previous runs by filename stem,
and that a match fills in path, format and dimensions from the file itself.

*** Fixtures ***
- image_bytes, output_dir (defined in conftest.py)
- tmp_path (defined by Pytest)
"""

import unittest.mock

import pytest

# following entities are tested in this module:
from redpaper.cache import find_cached_file
from redpaper.cache import reconcile
from redpaper.wallpaper import Candidate

CANDIDATE = Candidate(title="Sunset Over The Bay", url="https://i.redd.it/sunset.jpg")


def test_reconcile_hit(output_dir, image_bytes):
    output_dir.mkdir()
    cached = output_dir / "sunset_over_the_bay.jpg"
    cached.write_bytes(image_bytes(2560, 1440, "JPEG"))

    wallpaper = reconcile(CANDIDATE, output_dir)

    assert wallpaper.path == cached
    assert wallpaper.format == "jpeg"
    assert wallpaper.dimensions == (2560, 1440)
    assert wallpaper.title == CANDIDATE.title
    assert wallpaper.url == CANDIDATE.url


def test_reconcile_hit_any_extension(output_dir, image_bytes):
    """The stem alone decides a hit, the format comes from the bytes."""

    output_dir.mkdir()
    cached = output_dir / "sunset_over_the_bay.img"
    cached.write_bytes(image_bytes(800, 600, "PNG"))

    wallpaper = reconcile(CANDIDATE, output_dir)

    assert wallpaper.path == cached
    assert wallpaper.format == "png"
    assert wallpaper.dimensions == (800, 600)


def test_reconcile_miss(output_dir, image_bytes):
    output_dir.mkdir()
    (output_dir / "sunrise_over_the_bay.jpeg").write_bytes(image_bytes())

    wallpaper = reconcile(CANDIDATE, output_dir)

    assert wallpaper.path is None
    assert wallpaper.format is None
    assert wallpaper.dimensions is None


def test_reconcile_missing_directory_is_miss(output_dir):
    wallpaper = reconcile(CANDIDATE, output_dir)

    assert wallpaper.path is None
    assert not output_dir.exists()


def test_reconcile_ignores_directories(output_dir):
    (output_dir / "sunset_over_the_bay.jpeg").mkdir(parents=True)

    assert reconcile(CANDIDATE, output_dir).path is None


def test_reconcile_ignores_subdirectory_contents(output_dir, image_bytes):
    nested = output_dir / "old"
    nested.mkdir(parents=True)
    (nested / "sunset_over_the_bay.jpeg").write_bytes(image_bytes())

    assert reconcile(CANDIDATE, output_dir).path is None


def test_reconcile_unreadable_image_is_miss(output_dir):
    output_dir.mkdir()
    (output_dir / "sunset_over_the_bay.jpeg").write_bytes(b"not an image at all")

    wallpaper = reconcile(CANDIDATE, output_dir)

    assert wallpaper.path is None
    assert wallpaper.format is None


@unittest.mock.patch("redpaper.image_handler.requests.get", autospec=True)
def test_reconcile_never_downloads(mock_get, output_dir, image_bytes):
    output_dir.mkdir()
    (output_dir / "sunset_over_the_bay.jpeg").write_bytes(image_bytes())

    reconcile(CANDIDATE, output_dir)

    mock_get.assert_not_called()


def test_find_cached_file_multiple_matches(output_dir, image_bytes):
    """With several matches one of them wins; which one depends on listing order."""

    output_dir.mkdir()
    matches = {output_dir / "sunset_over_the_bay.jpeg", output_dir / "sunset_over_the_bay.png"}
    for path in matches:
        path.write_bytes(image_bytes())

    assert find_cached_file("sunset_over_the_bay", output_dir) in matches


def test_find_cached_file_prefix_collision(output_dir, image_bytes):
    """Titles that normalize to the same stem share the file already on disk."""

    output_dir.mkdir()
    saved = output_dir / "foobar.jpeg"
    saved.write_bytes(image_bytes())

    assert reconcile(Candidate(title="foo/bar", url="u"), output_dir).path == saved


@pytest.mark.parametrize("title", ["", "   ", "???", '<>:"/\\|?*'])
def test_empty_stem_never_matches(output_dir, image_bytes, title):
    output_dir.mkdir()
    (output_dir / "anything.jpeg").write_bytes(image_bytes())

    assert reconcile(Candidate(title=title, url="u"), output_dir).path is None
