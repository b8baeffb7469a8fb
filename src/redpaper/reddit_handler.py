"""
Reddit Listing Source

This module turns a Query into the candidate wallpapers of a subreddit listing. It builds
the listing url, issues a single GET to reddit's public json endpoint and reads the posts
out of the response.

The json endpoint needs no authentication. The response for a listing looks like:

    {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": {"title": ..., "url": ...}}, ...]}}

Only 'title' and 'url' are read from each post. Failing to reach reddit is not an error
for the caller: it is logged and no candidates are returned, exactly as if the listing
had been empty.
"""

import json
import logging
import random
from functools import wraps
from urllib.parse import quote
from typing import Optional

import requests

from redpaper import __version__
from redpaper.query import Query
from redpaper.wallpaper import Candidate

logger = logging.getLogger(__name__)

# reddit throttles generic user agents hard, so identify ourselves
HEADERS = {"User-Agent": f"python:redpaper:v{__version__}"}
REQUEST_TIMEOUT = 30


def base_url(func):
    """
    Inject the base url into url builders. Should the url change in the future it can be
    done in one place.
    """

    base_url = "https://www.reddit.com"

    @wraps(func)
    def wrapper(*args, **kwargs):
        return func(base_url=base_url, *args, **kwargs)

    return wrapper


@base_url
def listing_url(query: Query, *args, **kwargs) -> str:
    """
    e.g. https://www.reddit.com/r/EarthPorn/top.json?limit=25&t=week
    """

    base_url: str = kwargs.get("base_url")

    return "/".join([base_url, "r", quote(query.subreddit.strip()), query.request_path])


def parse_listing(body: str) -> list[Candidate]:
    """
    Read candidates out of a listing response body. Malformed json or a response without
    a data.children list yields no candidates. Posts without a string title and url are
    dropped, the rest are kept in listing order.
    """

    try:
        listing = json.loads(body)
    except (json.JSONDecodeError, TypeError) as error:
        logger.error(f"Could not parse reddit response: {error}")
        return []

    try:
        children = listing["data"]["children"]
    except (KeyError, TypeError):
        logger.warning("Reddit response has no data.children, treating as empty.")
        return []

    if not isinstance(children, list):
        logger.warning("Reddit response data.children is not a list, treating as empty.")
        return []

    candidates = []

    for child in children:
        post = child.get("data") if isinstance(child, dict) else None

        if not isinstance(post, dict):
            continue

        title = post.get("title")
        url = post.get("url")

        if not isinstance(title, str) or not isinstance(url, str):
            logger.debug(f"Dropping post without title or url: {post.get('id')}")
            continue

        candidates.append(Candidate(title=title, url=url))

    return candidates


def fetch(query: Query, rng: Optional[random.Random] = None) -> list[Candidate]:
    """
    Fetch the candidates of a listing. When the query asks for random order the list is
    shuffled (uniformly, via random.shuffle) before it is returned; pass rng to make the
    shuffle reproducible.
    """

    url = listing_url(query)
    logger.info(f"Searching {url}")

    try:
        r = requests.get(url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()

    except requests.exceptions.RequestException as error:
        logger.error(f"Could not reach reddit: {error}")
        return []

    candidates = parse_listing(r.text)
    logger.info(f"Found {len(candidates)} candidates in r/{query.subreddit}")

    if query.randomize:
        (rng or random).shuffle(candidates)

    return candidates
