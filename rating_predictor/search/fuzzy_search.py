import re
from typing import Callable

from rapidfuzz import distance, process
from unidecode import unidecode

from rating_predictor.logger import logger
from rating_predictor.models import Movie


def _clean_string(string):
    string = unidecode(string).lower()
    return re.sub(r"[^\x00-\x7F]", "", string)


def get_searcher(movies: list[Movie]) -> Callable[[str, int], list[tuple[int, str]]]:
    ids_2_titles = {movie.id: movie.full_title for movie in movies}
    ids_2_clean_titles = {movie.id: _clean_string(movie.title) for movie in movies}

    def search(query: str, limit: int = 10) -> list[tuple[int, str]]:
        if len(query) == 0:
            raise ValueError("search query is empty")

        query = _clean_string(query)
        # https://maxbachmann.github.io/RapidFuzz/Usage/distance/JaroWinkler.html
        top_matches = process.extract(
            query,
            ids_2_clean_titles,
            limit=limit,
            scorer=distance.JaroWinkler.normalized_distance,
        )
        logger.debug(top_matches)
        return [(movie_id, ids_2_titles[movie_id]) for _, _, movie_id in top_matches]

    return search
