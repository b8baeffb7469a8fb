"""
Wallpaper Data Model

A Candidate is a post pulled from a reddit listing: a title and the address of an image.
A Wallpaper is the record of one candidate as it moves through the pipeline. It starts
with only the title and url, gains a format and dimensions once the image bytes have
been inspected (either from the local cache or from a download) and finally gains the
path of the file on disk.

Wallpapers are frozen. Each stage of the pipeline receives a Wallpaper and hands back
an updated copy built with dataclasses.replace, so exactly one stage holds a given
version at any time.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Optional

# characters that are illegal in filenames on at least one common filesystem
FORBIDDEN_CHARS = frozenset('<>:"/\\|?*')

SUPPORTED_FORMATS = ("jpeg", "png", "gif")


def construct_filename(title: str, format: Optional[str] = None) -> str:
    """
    The name under which a wallpaper is stored on disk. Title is trimmed, lowercased,
    stripped of characters that are illegal in filenames and has its spaces replaced by
    underscores. Without a format only the stem is returned, which is what the cache
    searches for before the format of an image is known.

    Stripping characters is lossy: 'foo/bar' and 'foobar' produce the same stem and
    share one file on disk.
    """

    stem = "".join(
        "_" if char == " " else char
        for char in title.strip().lower()
        if char not in FORBIDDEN_CHARS
    )

    if format:
        return f"{stem}.{format}"

    return stem


@dataclass(frozen=True)
class Candidate:
    title: str
    url: str


@dataclass(frozen=True)
class Wallpaper:
    """
    format and dimensions always travel together: both are None until the image bytes
    have been inspected. A path is only ever set by the cache or by a successful save,
    so a Wallpaper with a path points at an existing file.
    """

    title: str
    url: str
    format: Optional[str] = None
    dimensions: Optional[tuple[int, int]] = None
    path: Optional[Path] = None

    def __post_init__(self):
        if (self.format is None) != (self.dimensions is None):
            raise ValueError(
                f"format and dimensions must be set together (got {self.format!r}, {self.dimensions!r})"
            )

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "Wallpaper":
        return cls(title=candidate.title, url=candidate.url)

    @property
    def stem(self) -> str:
        return construct_filename(self.title)

    @property
    def filename(self) -> str:
        return construct_filename(self.title, self.format)

    @property
    def ratio(self) -> Optional[float]:
        """width / height, or None before dimensions are known."""

        if self.dimensions is None:
            return None

        width, height = self.dimensions
        return width / height

    @property
    def megapixels(self) -> Optional[float]:
        if self.dimensions is None:
            return None

        width, height = self.dimensions
        return width * height / 1_000_000


@dataclass(frozen=True)
class Constraints:
    """
    Acceptance criteria for a wallpaper. An unset bound is unbounded on that side.
    Bounds are inclusive.
    """

    output_dir: Path
    min_ratio: Optional[float] = None
    max_ratio: Optional[float] = None
    min_megapixels: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "output_dir", Path(self.output_dir).expanduser())
