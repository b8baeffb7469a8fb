"""
Local Cache

Before downloading a candidate, look in the output directory for a file that was saved for
it on a previous run. The format of a candidate is unknown until its bytes are inspected, so
the lookup matches on the filename stem alone: any regular file whose name starts with the
stem counts as a hit, whatever its extension.

If several files match, the last one listed wins. Directory listing order is not defined,
so which of several matches is used is not deterministic.
"""

import logging
from pathlib import Path
from dataclasses import replace
from typing import Optional

from redpaper import image_handler
from redpaper.wallpaper import Candidate, Wallpaper

logger = logging.getLogger(__name__)


def find_cached_file(stem: str, output_dir: Path) -> Optional[Path]:
    """
    Return the last regular file directly inside output_dir whose name starts with stem, or
    None. A directory that does not exist yet is an empty cache.
    """

    # an empty stem would match every file in the directory
    if not stem:
        return None

    try:
        entries = list(Path(output_dir).expanduser().iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return None

    match = None

    for entry in entries:
        if entry.is_file() and entry.name.startswith(stem):
            match = entry

    return match


def reconcile(candidate: Candidate, output_dir: Path) -> Wallpaper:
    """
    Build the Wallpaper for a candidate, filling in path, format and dimensions from a
    previously saved file when one exists. Never raises: a file that cannot be read or
    identified is logged and treated as a miss.
    """

    wallpaper = Wallpaper.from_candidate(candidate)
    cached = find_cached_file(wallpaper.stem, output_dir)

    if cached is None:
        return wallpaper

    try:
        format, dimensions = image_handler.identify_image(cached.read_bytes())

    except OSError as error:
        logger.warning(f"Could not read cached file {cached}: {error}")
        return wallpaper

    except image_handler.UnsupportedFormat as error:
        logger.warning(f"Ignoring cached file {cached}: {error}")
        return wallpaper

    logger.info(f"Found '{candidate.title}' in cache at {cached}")

    return replace(wallpaper, format=format, dimensions=dimensions, path=cached)
