"""
redpaper Configuration Management

This file handles utilities related to generating and loading variables from a configuration file.
RedpaperConfig should be loaded by the command line before a search is run and turned into the
Query and Constraints the selection pipeline works with; the pipeline itself never reads the
configuration. Raise a RedpaperConfigError for any issues that arise in processing or retrieving
these configuration variables.

The configuration file is "config.json" and is saved at ~/.config/redpaper/config.json as per
modern Linux app development conventions. Set REDPAPER_CONFIG_DIR to use another directory.
"""

import json
import os
from fractions import Fraction
from dataclasses import dataclass
from dataclasses import asdict, fields, replace
from pathlib import Path, PurePath
from typing import Optional

from redpaper.query import Query
from redpaper.wallpaper import Constraints


class RedpaperConfigError(Exception):
    """Raise when an issue occurs with handling redpaper configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


def parse_number(value) -> Optional[float]:
    """
    Read a bound given as a number or as a fraction such as "16/9", which is the natural way
    to write an aspect ratio. None stays None. Raise ValueError for anything else.
    """

    if value is None:
        return None

    message = f"'{value}' is not a number or a fraction such as 16/9."

    # json true/false would otherwise read as 1.0/0.0
    if isinstance(value, bool):
        raise ValueError(message)

    try:
        if isinstance(value, str):
            return float(Fraction(value.strip()))

        return float(value)

    except (ValueError, TypeError, ZeroDivisionError):
        raise ValueError(message)


def default_config_dir() -> Path:
    try:
        return Path(os.environ["REDPAPER_CONFIG_DIR"]).expanduser()

    except KeyError:
        return Path("~/.config/redpaper").expanduser()


@dataclass
class RedpaperConfig:
    """
    Dataclass to represent configuration variables for redpaper.

    The pattern applied is to instantiate a RedpaperConfig by supplying variadic keyword arguments from
    a deserialized json object. That way application code can reference the identifiers in the
    dataclass without ever touching brittle dictionary keys. The json object is fully flat.
    """

    CONFIG_DIR: Path = None
    OUTPUT_DIR: Path = Path("~/.local/share/backgrounds").expanduser()
    SUBREDDIT: str = "EarthPorn"
    MODE: str = "hot"
    SPAN: Optional[str] = None
    QUERY_SIZE: int = 25
    MIN_RATIO: Optional[float] = None
    MAX_RATIO: Optional[float] = None
    MIN_MEGAPIXELS: Optional[float] = None
    RANDOM: bool = False
    RUN_EVERY: Optional[int] = None  # seconds

    def __post_init__(self):
        """
        Handle the case where a new RedpaperConfig is created from JSON, which cannot
        deserialize a str into a Path.
        """

        if self.CONFIG_DIR is None:
            self.CONFIG_DIR = default_config_dir()

        self.CONFIG_DIR = Path(self.CONFIG_DIR).expanduser()
        self.OUTPUT_DIR = Path(self.OUTPUT_DIR).expanduser()

        try:
            self.MIN_RATIO = parse_number(self.MIN_RATIO)
            self.MAX_RATIO = parse_number(self.MAX_RATIO)
            self.MIN_MEGAPIXELS = parse_number(self.MIN_MEGAPIXELS)

        except ValueError as error:
            raise RedpaperConfigError(f"Invalid constraint in configuration: {error}")

    @property
    def config_file(self) -> Path:
        return self.CONFIG_DIR / "config.json"

    @property
    def log_file(self) -> Path:
        return self.CONFIG_DIR / "latest.log"

    def merge(self, **overrides) -> "RedpaperConfig":
        """
        Return a copy of this config with overrides applied, e.g. options given on the command
        line. None means the option was not given and keeps the configured value.
        """

        known = {field.name for field in fields(self)}
        unknown = set(overrides) - known

        if unknown:
            raise RedpaperConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        return replace(
            self, **{key: value for key, value in overrides.items() if value is not None}
        )

    def query(self) -> Query:
        """Raises InvalidQuery for an invalid mode/span/size combination."""

        return Query.build(
            subreddit=self.SUBREDDIT,
            mode=self.MODE,
            span=self.SPAN,
            size=self.QUERY_SIZE,
            randomize=self.RANDOM,
        )

    def constraints(self) -> Constraints:
        return Constraints(
            output_dir=self.OUTPUT_DIR,
            min_ratio=self.MIN_RATIO,
            max_ratio=self.MAX_RATIO,
            min_megapixels=self.MIN_MEGAPIXELS,
        )

    def generate_config_json(self) -> Path:
        """
        Write the RedpaperConfig to file, serializing to JSON. Returns filepath of written
        config.json file which is located at CONFIG_DIR.

        Warning: will overwrite any existing config file for redpaper.
        """

        try:
            to_json = json.dumps(asdict(self), sort_keys=True, indent=4, cls=PathEncoder)

        except TypeError as error:
            raise RedpaperConfigError(
                f"There was an error trying to serialize config data to JSON: {error}"
            )

        try:
            self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)

            with open(self.config_file, "w") as file:
                file.write(to_json)

        except OSError as error:
            raise RedpaperConfigError(
                f"There was an error saving the configuration file: {error}."
            )

        return self.config_file


def init() -> RedpaperConfig:
    """Load the redpaper configuration, generating a default config file if there is none yet."""

    try:
        config: RedpaperConfig = load_config()

    except FileNotFoundError:

        config: RedpaperConfig = RedpaperConfig()
        config.generate_config_json()

    return config


def load_config(config_dir: Path = None) -> RedpaperConfig:
    """
    Load config.json from config_dir (default: REDPAPER_CONFIG_DIR or ~/.config/redpaper) and
    instantiate variables as a RedpaperConfig dataclass. Raise FileNotFoundError if there is no
    config file, RedpaperConfigError if it cannot be read.
    """

    config_dir = Path(config_dir).expanduser() if config_dir else default_config_dir()
    config_src = config_dir / "config.json"

    try:
        with config_src.open("r") as file:
            from_json = json.loads(file.read())

    except json.JSONDecodeError as error:
        raise RedpaperConfigError(f"There was an issue reading the config: {error}")

    except FileNotFoundError:
        raise

    except OSError as error:
        raise RedpaperConfigError(f"There was an issue opening the config: {error}")

    if not isinstance(from_json, dict):
        raise RedpaperConfigError(f"{config_src} does not contain a json object.")

    # the config file always describes the directory it was loaded from
    from_json["CONFIG_DIR"] = config_dir

    try:
        return RedpaperConfig(**from_json)

    except TypeError as error:
        raise RedpaperConfigError(f"There was an issue loading the config: {error}")
