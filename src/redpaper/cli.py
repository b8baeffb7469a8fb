"""
redpaper

Find a fresh wallpaper on reddit and set it as your desktop background.

This module defines the entry point to the redpaper CLI. The 'redpaper' command group loads the
configuration file (~/.config/redpaper/config.json) and sets up console output and logging. Its
subcommands override configured values with command line options, turn the result into a Query
and Constraints and hand those to the selection pipeline.
"""

import json
from io import StringIO
from time import sleep
from dataclasses import asdict
from typing import Optional
from pathlib import Path

import click
from click.core import ParameterSource

from redpaper import selection
from redpaper import wallpaper_handler
from redpaper.config import init, PathEncoder, RedpaperConfig
from redpaper.query import Mode, Query
from redpaper.wallpaper import Constraints, Wallpaper

from redpaper.cli_utils.decorators import catch_errors
from redpaper.cli_utils.params import NUMBER_OR_FRACTION
from redpaper.cli_utils.console import *


@click.group()
@click.option(
    "--verbose",
    "verbosity",
    flag_value="verbose",
    help="Also print the log of the search to the terminal.",
)
@click.option(
    "--quiet",
    "verbosity",
    flag_value="quiet",
    help="Silence all output printed to stdout.",
)
@click.version_option(package_name="redpaper")
@click.pass_context
@catch_errors
def cli(ctx: click.Context, verbosity):
    """
    redpaper

    find a fresh wallpaper on reddit and set it as your desktop background.


    ====================
    Quickstart
    ====================

    Set a new wallpaper from the hot listing of r/EarthPorn:

        $ redpaper run

    Take the best wallpaper of the week that is at least as wide as a 16:10 screen:

        $ redpaper run --mode top --span week --min-ratio 16/10

    Pick a random large wallpaper every hour:

        $ redpaper run --random --min-megapixels 4 --every 3600


    Defaults for every option are read from ~/.config/redpaper/config.json. See
    them with:

        $ redpaper config
    """

    # if verbosity is set to quiet, capture all std_out to a junk stream.
    if verbosity == "quiet":
        console.file = StringIO()

    config: RedpaperConfig = init()
    setup_logging(log_file=config.log_file, verbose=verbosity == "verbose")

    ctx.obj = config


def run_once(query: Query, constraints: Constraints) -> Optional[Wallpaper]:
    """
    Search for a wallpaper once and set it as desktop background. A failure to set the
    background is reported but the wallpaper still counts as found.
    """

    describe(
        f":mag-emoji: 'run' searching r/{query.subreddit} ({query.mode.value}) for a new wallpaper..."
    )

    wallpaper = selection.select(query, constraints)

    if wallpaper is None:
        fail("No wallpaper found!")
        return None

    confirm_success(
        f":floppy_disk-emoji: 'run' found '{wallpaper.title}' at {wallpaper.path}"
    )

    try:
        wallpaper_handler.update_wallpaper(wallpaper.path)

    except wallpaper_handler.WallpaperUpdateError as error:
        warn(f"Could not set wallpaper: {error}")
        return wallpaper

    confirm_success(f":white_check_mark-emoji: 'run' updated wallpaper to {wallpaper.path}")

    return wallpaper


@cli.command(name="run")
@click.option("--subreddit", "-r", type=str, help="Subreddit to search, e.g. EarthPorn")
@click.option(
    "--mode",
    "-m",
    type=click.Choice([mode.value for mode in Mode], case_sensitive=False),
    help="Which listing of the subreddit to search.",
)
@click.option(
    "--span",
    "-s",
    type=str,
    help="(top and controversial only) time span of the listing: hour, day, week, month, year or all.",
)
@click.option(
    "--query-size",
    "-n",
    type=click.IntRange(1, 100),
    help="Number of posts to ask reddit for.",
)
@click.option(
    "--min-ratio",
    type=NUMBER_OR_FRACTION,
    help="Smallest accepted width/height ratio, e.g. 1.6 or 16/10.",
)
@click.option(
    "--max-ratio",
    type=NUMBER_OR_FRACTION,
    help="Largest accepted width/height ratio, e.g. 21/9.",
)
@click.option(
    "--min-megapixels",
    type=NUMBER_OR_FRACTION,
    help="Smallest accepted image size in megapixels.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory wallpapers are saved to.",
)
@click.option(
    "--random/--no-random",
    "randomize",
    default=False,
    help="Consider the posts of the listing in random order, or in listing order.",
)
@click.option(
    "--every",
    "run_every",
    type=click.IntRange(min=1),
    help="Repeat the search every INTERVAL seconds.",
)
@click.pass_obj
@catch_errors
def run(
    config: RedpaperConfig,
    subreddit,
    mode,
    span,
    query_size,
    min_ratio,
    max_ratio,
    min_megapixels,
    output_dir,
    randomize,
    run_every,
):
    """
    Find a new wallpaper and set it as your desktop background.
    """

    # only an explicit --random/--no-random overrides the configured order
    if click.get_current_context().get_parameter_source("randomize") is ParameterSource.DEFAULT:
        randomize = None

    config = config.merge(
        SUBREDDIT=subreddit,
        MODE=mode,
        SPAN=span,
        QUERY_SIZE=query_size,
        MIN_RATIO=min_ratio,
        MAX_RATIO=max_ratio,
        MIN_MEGAPIXELS=min_megapixels,
        OUTPUT_DIR=output_dir,
        RANDOM=randomize,
        RUN_EVERY=run_every,
    )

    # an invalid query fails here, before anything is requested from reddit
    query = config.query()
    constraints = config.constraints()

    wallpaper = run_once(query, constraints)

    # each repetition is an independent search
    while config.RUN_EVERY:
        describe(f"Waiting {config.RUN_EVERY}s for next search...")
        sleep(config.RUN_EVERY)
        run_once(query, constraints)

    if wallpaper is None:
        raise SystemExit(1)


@cli.command(name="current")
@catch_errors
def current():
    """Show the current desktop background."""

    describe(str(wallpaper_handler.get_current_wallpaper()))


@cli.command(name="config")
@click.option(
    "--reset",
    is_flag=True,
    default=False,
    help="Replace the configuration file with the defaults.",
)
@click.pass_obj
@catch_errors
def show_config(config: RedpaperConfig, reset: bool):
    """Show the configuration redpaper runs with."""

    if reset:
        config = RedpaperConfig(CONFIG_DIR=config.CONFIG_DIR)
        config_path = config.generate_config_json()
        confirm_success(f":floppy_disk-emoji: 'config' wrote defaults to {config_path}")

    console.print_json(json.dumps(asdict(config), cls=PathEncoder))


def main():
    cli()


if __name__ == "__main__":
    main()
