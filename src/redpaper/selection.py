"""
Wallpaper Selection

Find a single new wallpaper for a query. Candidates from the listing are considered strictly
in the order reddit (or the shuffle) returned them and the first one that satisfies every
constraint wins; the scan stops there.

Each candidate goes through the same steps:

    reconcile -> cache hit  ---------------------> evaluate -> save -> accepted
              -> cache miss -> download -> ok ---> evaluate -> save -> accepted
                                       -> failed -> rejected, next candidate

A failed download, an unsupported format, a candidate that does not meet the constraints or
is already the desktop background, and a failed save all simply move on to the next
candidate. Running out of candidates is not an error: select() returns None.
"""

import logging
import random
from pathlib import Path
from typing import Callable, Optional

from redpaper import cache
from redpaper import image_handler
from redpaper import reddit_handler
from redpaper import wallpaper_handler
from redpaper.query import Query
from redpaper.wallpaper import Constraints, Wallpaper

logger = logging.getLogger(__name__)


def meets_constraints(wallpaper: Wallpaper, constraints: Constraints) -> bool:
    """
    True if the ratio and size of the wallpaper lie within the (inclusive) bounds of the
    constraints. A wallpaper without dimensions never qualifies.
    """

    ratio = wallpaper.ratio
    megapixels = wallpaper.megapixels

    if ratio is None or megapixels is None:
        return False

    if constraints.min_ratio is not None and ratio < constraints.min_ratio:
        logger.info(f"'{wallpaper.title}' is too narrow (ratio {ratio:.2f})")
        return False

    if constraints.max_ratio is not None and ratio > constraints.max_ratio:
        logger.info(f"'{wallpaper.title}' is too wide (ratio {ratio:.2f})")
        return False

    if constraints.min_megapixels is not None and megapixels < constraints.min_megapixels:
        logger.info(f"'{wallpaper.title}' is too small ({megapixels:.2f} MP)")
        return False

    return True


def is_active(wallpaper: Wallpaper, active: Optional[Path]) -> bool:
    """
    Whether the wallpaper is the file currently set as desktop background, compared by file
    name. An unknown background (None) matches nothing.
    """

    if active is None:
        return False

    name = wallpaper.path.name if wallpaper.path is not None else wallpaper.filename
    return Path(active).name == name


def _active_background(get_current_wallpaper: Callable[[], Path]) -> Optional[Path]:

    try:
        return get_current_wallpaper()
    except wallpaper_handler.WallpaperUpdateError as error:
        logger.warning(f"Current background is unknown: {error}")
        return None


def select(
    query: Query,
    constraints: Constraints,
    get_current_wallpaper: Callable[[], Path] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Wallpaper]:
    """
    Return the first wallpaper of the listing that meets the constraints and is not already
    the desktop background, saved to constraints.output_dir. Return None if there is none.

    get_current_wallpaper defaults to the desktop query of wallpaper_handler. rng is handed to
    the listing shuffle when the query asks for random order.
    """

    if get_current_wallpaper is None:
        get_current_wallpaper = wallpaper_handler.get_current_wallpaper

    candidates = reddit_handler.fetch(query, rng=rng)

    if not candidates:
        logger.error("No wallpaper found: the listing is empty.")
        return None

    active = _active_background(get_current_wallpaper)
    output_dir = constraints.output_dir

    for candidate in candidates:

        wallpaper = cache.reconcile(candidate, output_dir)
        data = None

        if wallpaper.path is None:
            try:
                wallpaper, data = image_handler.download(wallpaper)

            except image_handler.FetchError as error:
                logger.warning(f"Wallpaper could not be downloaded: {error}")
                continue

            except image_handler.UnsupportedFormat as error:
                logger.warning(f"Skipping '{candidate.title}': {error}")
                continue

        if not meets_constraints(wallpaper, constraints):
            continue

        if is_active(wallpaper, active):
            logger.info(f"'{wallpaper.title}' is already the desktop background")
            continue

        try:
            wallpaper = image_handler.save(wallpaper, output_dir, data)

        except image_handler.PersistError as error:
            logger.warning(f"Downloaded wallpaper could not be saved: {error}")
            continue

        logger.info(f"Selected '{wallpaper.title}' ({wallpaper.path})")
        return wallpaper

    logger.error("No wallpaper found!")
    return None
