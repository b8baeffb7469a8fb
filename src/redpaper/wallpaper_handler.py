"""
Gnome Wallpaper Handler

This module reads and updates the Gnome desktop background through the gsettings command
line tool, which exposes the settings schema org.gnome.desktop.background. More
information on this schema can be found at:
https://github.com/GNOME/gsettings-desktop-schemas/blob/master/schemas/org.gnome.desktop.background.gschema.xml.in

The background is stored under the key 'picture-uri' (and 'picture-uri-dark' for the dark
style on Gnome 42 and later) as a file:// uri.
"""

import logging
import subprocess
from pathlib import Path
from collections import OrderedDict
from urllib.parse import unquote

from redpaper import image_handler

logger = logging.getLogger(__name__)

SCHEMA = "org.gnome.desktop.background"
INTERFACE_SCHEMA = "org.gnome.desktop.interface"


class WallpaperUpdateError(Exception):
    """
    Raised when an attempt to read or update the Gnome desktop background fails.
    """

    pass


def _gsettings(*args: str, schema: str = SCHEMA) -> subprocess.CompletedProcess:
    """
    subprocess.CalledProcessError is raised by run if a non-zero exit status is returned. This
    is the main way of determining if gsettings had a problem.
    """

    # ordered dict is used here for clarity and to preserve sequence for command arguments.
    command = OrderedDict([("cmd", "gsettings"), ("subcmd", args[0]), ("schema", schema)])
    command.update((f"arg{index}", arg) for index, arg in enumerate(args[1:]))

    try:
        return subprocess.run(
            list(command.values()),
            check=True,
            text=True,
            stdin=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )

    except subprocess.CalledProcessError as error:
        raise WallpaperUpdateError(f"gsettings {args[0]} failed: {error}")

    except FileNotFoundError:
        raise WallpaperUpdateError("gsettings is not available on this system.")


def _get_string(key: str, schema: str = SCHEMA) -> str:

    process = _gsettings("get", key, schema=schema)

    # gsettings prints the value as a quoted gvariant string, e.g. 'file:///home/me/x.jpg'.
    return process.stdout.strip().removeprefix("'").removesuffix("'")


def _prefers_dark() -> bool:

    try:
        return _get_string("color-scheme", schema=INTERFACE_SCHEMA) == "prefer-dark"

    # releases before Gnome 42 have no color-scheme key and no dark style background
    except WallpaperUpdateError:
        return False


def get_current_wallpaper() -> Path:
    """
    Retrieve the wallpaper currently shown on the desktop. Under the dark style that is the
    one stored in picture-uri-dark, unless that key is empty.
    """

    value = ""

    if _prefers_dark():
        value = _get_string("picture-uri-dark")

    if not value:
        value = _get_string("picture-uri")

    if not value:
        raise WallpaperUpdateError("no desktop background is set.")

    return Path(unquote(value.removeprefix("file://")))


def update_wallpaper(img_path: Path) -> None:
    """
    Update the background image to the one at img_path. Raise WallpaperUpdateError if the path
    is not an image file or gsettings fails.
    """

    """
    gsettings does no validation of its own: an invalid path silently sets the background to
    no image at all. So make sure the file exists and is an image before the update, and always
    pass the absolute path so the resource is locatable from the schema.
    """

    img_path = Path(str(img_path).removeprefix("file://"))
    wallpaper_location = img_path.expanduser().resolve()

    # subsequent operations will fail if path does not exist or is not a file, so catch this.
    if not wallpaper_location.is_file():
        raise WallpaperUpdateError(
            f"Invalid path provided for image location: {img_path} does not exist."
        )

    try:
        image_handler.validate_image(wallpaper_location)
    except image_handler.UnsupportedFormat as error:
        raise WallpaperUpdateError(
            f"Invalid image type provided. {wallpaper_location.name} is not a valid image: {error}"
        )

    uri = wallpaper_location.as_uri()
    _gsettings("set", "picture-uri", uri)

    # the dark style key only exists on newer Gnome releases
    try:
        _gsettings("set", "picture-uri-dark", uri)
    except WallpaperUpdateError as error:
        logger.debug(f"Could not set dark style background: {error}")

    logger.info(f"Desktop background set to {wallpaper_location}")
