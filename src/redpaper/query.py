"""
Reddit Query Model

Value types describing where redpaper looks for wallpapers (which subreddit, which
listing and, for the ranked listings, over which time span) and how many posts it
asks for. A Query is built once per run from the configuration and never changes.

Reddit exposes listings as json under /r/<subreddit>/<mode>.json. The 'top' and
'controversial' listings are ranked over a time span passed as the 't' parameter.
See https://www.reddit.com/dev/api#GET_{sort} for the listing parameters.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional

# reddit accepts 1..100 for the 'limit' parameter of a listing
MIN_QUERY_SIZE = 1
MAX_QUERY_SIZE = 100


class InvalidQuery(Exception):
    """
    Raised when a query cannot be built: unknown mode or span token, a ranked mode
    without a span, or a query size reddit will not accept.
    """

    pass


class Span(Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @classmethod
    def from_identifier(cls, identifier: str) -> "Span":
        """
        Parse a span token. Besides the reddit names a few shorthands are accepted,
        e.g. '24h' or '7d'.
        """

        aliases = {
            "24h": cls.DAY,
            "7d": cls.WEEK,
            "365d": cls.YEAR,
            "356d": cls.YEAR,
            "ever": cls.ALL,
        }

        token = str(identifier).strip().lower()

        try:
            return aliases.get(token) or cls(token)
        except ValueError:
            raise InvalidQuery(f"'{identifier}' is not a valid span.")


class Mode(Enum):
    NEW = "new"
    HOT = "hot"
    RISING = "rising"
    TOP = "top"
    CONTROVERSIAL = "controversial"

    @classmethod
    def from_identifier(cls, identifier: str) -> "Mode":
        try:
            return cls(str(identifier).strip().lower())
        except ValueError:
            raise InvalidQuery(f"'{identifier}' is not a valid mode.")

    @property
    def ranked(self) -> bool:
        """Ranked listings are ordered over a time span."""

        return self in (Mode.TOP, Mode.CONTROVERSIAL)


@dataclass(frozen=True)
class Query:
    """
    Where to look and how much to ask for. Use Query.build() to construct a query
    from raw tokens; the constructor itself validates the combination of fields.
    """

    subreddit: str
    mode: Mode = Mode.HOT
    span: Optional[Span] = None
    size: int = 25
    randomize: bool = False

    def __post_init__(self):

        if not self.subreddit or not str(self.subreddit).strip():
            raise InvalidQuery("a subreddit is required.")

        if self.mode.ranked and self.span is None:
            raise InvalidQuery(
                f"mode '{self.mode.value}' requires a span (hour, day, week, month, year or all)."
            )

        # span has no meaning for unranked listings, drop it so equal queries compare equal
        if not self.mode.ranked and self.span is not None:
            object.__setattr__(self, "span", None)

        if (
            isinstance(self.size, bool)
            or not isinstance(self.size, int)
            or not MIN_QUERY_SIZE <= self.size <= MAX_QUERY_SIZE
        ):
            raise InvalidQuery(
                f"query size must be between {MIN_QUERY_SIZE} and {MAX_QUERY_SIZE}, got {self.size}."
            )

    @classmethod
    def build(
        cls,
        subreddit: str,
        mode: str = "hot",
        span: str = None,
        size: int = 25,
        randomize: bool = False,
    ) -> "Query":
        """
        Build a Query from string tokens as they appear on the command line or in
        config.json. An unranked mode ignores any span that is supplied.
        """

        mode = Mode.from_identifier(mode)
        span = Span.from_identifier(span) if span is not None and mode.ranked else None

        return cls(
            subreddit=subreddit, mode=mode, span=span, size=size, randomize=randomize
        )

    @property
    def request_path(self) -> str:
        """
        The listing path relative to the subreddit, e.g. 'top.json?limit=25&t=week'.
        """

        path = f"{self.mode.value}.json?{self.size_param}"
        if self.span is not None:
            path += f"&t={self.span.value}"

        return path

    @property
    def size_param(self) -> str:
        return f"limit={self.size}"
