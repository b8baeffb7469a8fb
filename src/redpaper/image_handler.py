"""
Image Handler

Utilities for downloading, identifying and saving wallpaper images.

Downloading images: a plain GET on the url of a candidate, with no authentication. Reddit
posts frequently link to things that are not images (galleries, videos, html pages), so
the downloaded bytes are always inspected before they are accepted.

Identifying images: Pillow reads the header of the image to determine its format and size
without decoding the pixel data, so this is cheap even for large wallpapers. See the Pillow
docs on identifying images: https://pillow.readthedocs.io/en/stable/handbook/tutorial.html#identify-image-files

Saving images: files are named from the title and format of the wallpaper (see
wallpaper.construct_filename). Saving is idempotent, an existing file at the target path is
never rewritten.
"""

import io
import logging
from pathlib import Path
from dataclasses import replace
from typing import Optional

from PIL import Image, UnidentifiedImageError
import requests

from redpaper.wallpaper import Wallpaper
from redpaper.wallpaper import SUPPORTED_FORMATS

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class FetchError(Exception):
    """
    Raised when an image download is unsuccessful.
    """

    pass


class UnsupportedFormat(Exception):
    """
    Raised when binary data is not an image, or is an image in a format redpaper does not
    use as a wallpaper. Wrapper around the PIL UnidentifiedImageError for custom error messaging.
    """

    pass


class PersistError(Exception):
    """
    Raised when a wallpaper cannot be written to the output directory.
    """

    pass


def _identify(source) -> tuple[str, tuple[int, int]]:

    try:
        with Image.open(source) as image:
            format = (image.format or "").lower()
            dimensions = image.size

    except UnidentifiedImageError:
        raise UnsupportedFormat("data does not appear to be an image.")

    except Image.DecompressionBombError as error:
        raise UnsupportedFormat(str(error))

    if format not in SUPPORTED_FORMATS:
        raise UnsupportedFormat(
            f"format '{format}' is not supported (expected one of {', '.join(SUPPORTED_FORMATS)})."
        )

    return format, dimensions


def identify_image(data: bytes) -> tuple[str, tuple[int, int]]:
    """
    Return the format tag ('jpeg', 'png' or 'gif') and the (width, height) of an image held
    in memory. Raise UnsupportedFormat for anything else.
    """

    return _identify(io.BytesIO(data))


def validate_image(file_path: Path) -> str:
    """
    Determine whether the file at file_path is a usable wallpaper image and return its format.
    """

    try:
        format, _ = _identify(Path(file_path))

    except FileNotFoundError:
        raise UnsupportedFormat(f"Input {str(file_path)} could not be found.")

    except IsADirectoryError:
        raise UnsupportedFormat(f"Input {str(file_path)} is a directory.")

    return format


def download(wallpaper: Wallpaper) -> tuple[Wallpaper, bytes]:
    """
    Download the image of a wallpaper. Returns a copy of the wallpaper with its format and
    dimensions filled in, together with the raw bytes for save().

    Raises FetchError when the request fails or the server answers with an error status,
    UnsupportedFormat when the response is not a jpeg, png or gif.
    """

    """
    The get method from Requests automatically follows redirects (status codes 3XX) on your behalf.
    Many reddit posts link to a short url that redirects to the actual image resource, so
    redirect handling "out of the box" is what we want here.
    More info: https://docs.python-requests.org/en/latest/user/quickstart/#redirection-and-history
    """

    try:
        r = requests.get(wallpaper.url, timeout=REQUEST_TIMEOUT)

    except requests.exceptions.RequestException as error:
        raise FetchError(f"request for {wallpaper.url} failed: {error}")

    # successful request but received a bad response from the server.
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        raise FetchError(
            f"something went wrong trying to access {wallpaper.url} (status code {r.status_code})"
        )

    data = r.content

    try:
        format, dimensions = identify_image(data)
    except UnsupportedFormat as error:
        raise UnsupportedFormat(f"the resource at {wallpaper.url}: {error}")

    logger.info(
        f"Downloaded '{wallpaper.title}' ({format}, {dimensions[0]}x{dimensions[1]})"
    )

    return replace(wallpaper, format=format, dimensions=dimensions), data


def save(wallpaper: Wallpaper, directory: Path, data: Optional[bytes]) -> Wallpaper:
    """
    Save the image of a wallpaper in directory and return a copy of the wallpaper that records
    the path of the file.

    If the wallpaper already points at a file (a cache hit) or a file already exists at
    the target path, nothing is written. Otherwise the directory tree is created if needed and
    the bytes are written to a new file. Raises PersistError on any filesystem error.
    """

    if wallpaper.path is not None and Path(wallpaper.path).is_file():
        return wallpaper

    if wallpaper.format is None:
        raise PersistError(f"'{wallpaper.title}' has not been downloaded yet.")

    if not wallpaper.stem:
        raise PersistError(f"'{wallpaper.title}' does not produce a usable filename.")

    destination_path = Path(directory).expanduser() / wallpaper.filename

    # stat fails for names the filesystem rejects, e.g. a title longer than 255 bytes
    try:
        already_saved = destination_path.is_file()
        occupied = destination_path.exists()

    except OSError as error:
        raise PersistError(f"cannot use {destination_path.name!r} as a filename: {error}")

    # prevent overwriting an existing file. saving the same wallpaper twice is a no-op.
    if already_saved:
        logger.info(f"'{destination_path.name}' is already saved in {destination_path.parent}")
        return replace(wallpaper, path=destination_path)

    # edge case where destination path is a folder
    if occupied:
        raise PersistError(f"Destination {destination_path} exists and is not a file.")

    if data is None:
        raise PersistError(f"no image data to save for '{wallpaper.title}'.")

    try:
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        file = open(destination_path, "xb")

    except OSError as error:
        raise PersistError(f"could not create {destination_path}: {error}")

    try:
        with file:
            file.write(data)

    except OSError as error:
        # a truncated file would be picked up by the cache on the next run
        destination_path.unlink(missing_ok=True)
        raise PersistError(f"could not write {destination_path}: {error}")

    logger.info(f"Saved '{destination_path.name}' to {destination_path.parent}")

    return replace(wallpaper, path=destination_path)
