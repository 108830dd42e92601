"""
Functions that obtain the raw catalog and ratings text from the configured source.
"""

from pathlib import Path
from typing import Optional

import requests
from aiocache import cached
from fastapi.concurrency import run_in_threadpool

from rating_predictor.config import Settings
from rating_predictor.data.sample import SAMPLE_CATALOG, SAMPLE_RATINGS
from rating_predictor.errors import DataUnavailable
from rating_predictor.logger import logger
from rating_predictor.models import Dataset, RawData
from rating_predictor.parsing import parse_catalog, parse_ratings
from rating_predictor.utils import decode_text, timed

CATALOG_FILENAME = "u.item"
RATINGS_FILENAME = "u.data"


def embedded_sample(origin: str = "embedded") -> RawData:
    return RawData(SAMPLE_CATALOG, SAMPLE_RATINGS, origin)


def _download(url: str, timeout: float) -> str:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return decode_text(response.content)


@cached(ttl=600)
async def fetch_remote(movies_url: str, ratings_url: str, timeout: float = 30.0) -> RawData:
    try:
        logger.info(f"downloading movie catalog from {movies_url}")
        catalog_text = await run_in_threadpool(_download, movies_url, timeout)
        logger.info(f"downloading ratings from {ratings_url}")
        ratings_text = await run_in_threadpool(_download, ratings_url, timeout)
    except requests.RequestException as exc:
        raise DataUnavailable(
            f"could not download the MovieLens files ({exc}), "
            "check your network connection or upload the files manually"
        ) from exc
    return RawData(catalog_text, ratings_text, "remote")


def read_local(data_dir: Path) -> RawData:
    data_dir = Path(data_dir)
    catalog_path = data_dir / CATALOG_FILENAME
    ratings_path = data_dir / RATINGS_FILENAME
    try:
        catalog_text = decode_text(catalog_path.read_bytes())
        ratings_text = decode_text(ratings_path.read_bytes())
    except OSError as exc:
        raise DataUnavailable(
            f"could not read {exc.filename}, place {CATALOG_FILENAME} and "
            f"{RATINGS_FILENAME} in {data_dir.resolve()}"
        ) from exc
    return RawData(catalog_text, ratings_text, "local")


def read_uploads(movies_content: Optional[bytes], ratings_content: Optional[bytes]) -> RawData:
    if not movies_content or not ratings_content:
        raise DataUnavailable("please select both the movies file and the ratings file")
    return RawData(decode_text(movies_content), decode_text(ratings_content), "upload")


@timed
async def load_raw_text(
    settings: Settings, uploads: Optional[tuple[Optional[bytes], Optional[bytes]]] = None
) -> RawData:
    """Produce the raw texts from the configured source, or the sample when fallback is enabled."""
    source = "upload" if uploads is not None else settings.data_source
    try:
        if source == "remote":
            return await fetch_remote(
                settings.movies_url, settings.ratings_url, settings.fetch_timeout
            )
        if source == "local":
            return read_local(settings.data_dir)
        if source == "upload":
            if uploads is None:
                raise DataUnavailable("no files uploaded yet, please upload both MovieLens files")
            return read_uploads(*uploads)
        return embedded_sample()
    except DataUnavailable as exc:
        # uploads are an explicit user action, report them instead of masking
        if not settings.fallback_to_sample or source == "upload":
            raise
        logger.warning(f"{source} data source failed ({exc}), falling back to the embedded sample")
        return embedded_sample(origin="fallback")


def load_dataset(raw: RawData) -> Dataset:
    movies = parse_catalog(raw.catalog_text)
    ratings, num_users = parse_ratings(raw.ratings_text)
    if not movies:
        raise DataUnavailable(f"the {raw.origin} catalog contains no valid movie lines")
    if not ratings:
        raise DataUnavailable(f"the {raw.origin} ratings contain no valid rating lines")
    logger.info(
        f"data loaded from {raw.origin}: {num_users} users, {len(movies)} movies, {len(ratings)} ratings"
    )
    return Dataset(movies=movies, ratings=ratings, num_users=num_users, origin=raw.origin)
