"""
Parsers for the MovieLens 100k catalog (u.item) and ratings (u.data) formats.

Malformed lines are dropped, never raised: a line whose numeric fields do
not parse is rejected as a whole instead of producing a sentinel value.
"""

import math
import re
from typing import Optional

from unidecode import unidecode

from rating_predictor.logger import logger
from rating_predictor.models import Movie, Rating

CATALOG_SEPARATOR = "|"
RATINGS_SEPARATOR = "\t"

_YEAR_PATTERN = re.compile(r"\((\d{4})\)$")
_YEAR_SUFFIX = re.compile(r"\s*\(\d{4}\)$")


def collation_key(title: str) -> tuple[str, str]:
    """Sort key ordering titles the way a reader would, ignoring accents and case."""
    return unidecode(title).casefold(), title


def split_title(raw_title: str) -> tuple[str, Optional[int]]:
    match = _YEAR_PATTERN.search(raw_title)
    if match is None:
        return raw_title, None
    return _YEAR_SUFFIX.sub("", raw_title), int(match.group(1))


def _split_records(text: str) -> list[str]:
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def _parse_movie(line: str) -> Optional[Movie]:
    parts = line.split(CATALOG_SEPARATOR)
    if len(parts) < 2:
        return None
    try:
        movie_id = int(parts[0])
    except ValueError:
        return None
    title, year = split_title(parts[1])
    return Movie(id=movie_id, title=title, full_title=parts[1], year=year)


def parse_catalog(text: str) -> list[Movie]:
    movies, skipped = [], 0
    for line in _split_records(text):
        if not line.strip():
            continue
        movie = _parse_movie(line)
        if movie is None:
            skipped += 1
            continue
        movies.append(movie)

    movies.sort(key=lambda movie: collation_key(movie.title))
    if skipped:
        logger.debug(f"skipped {skipped} malformed catalog lines")
    logger.info(f"parsed {len(movies)} movies")
    return movies


def _parse_rating(line: str) -> Optional[Rating]:
    parts = line.split(RATINGS_SEPARATOR)
    if len(parts) < 3:
        return None
    try:
        user_id = int(parts[0])
        movie_id = int(parts[1])
        value = float(parts[2])
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return Rating(user_id=user_id, movie_id=movie_id, rating=value)


def parse_ratings(text: str) -> tuple[list[Rating], int]:
    """Parse rating triples, returning them in input order with the distinct user count."""
    ratings, users, skipped = [], set(), 0
    for line in _split_records(text):
        if not line.strip():
            continue
        rating = _parse_rating(line)
        if rating is None:
            skipped += 1
            continue
        ratings.append(rating)
        users.add(rating.user_id)

    if skipped:
        logger.debug(f"skipped {skipped} malformed rating lines")
    logger.info(f"parsed {len(ratings)} ratings from {len(users)} users")
    return ratings, len(users)
