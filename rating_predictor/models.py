"""
Data models and types.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional


class Movie(NamedTuple):
    id: int
    title: str
    full_title: str
    year: Optional[int]


class Rating(NamedTuple):
    user_id: int
    movie_id: int
    rating: float


class RawData(NamedTuple):
    catalog_text: str
    ratings_text: str
    origin: str


@dataclass(frozen=True)
class Dataset:
    movies: list[Movie]
    ratings: list[Rating]
    num_users: int
    origin: str
    _movies_by_id: dict[int, Movie] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_movies_by_id", {m.id: m for m in self.movies})

    @property
    def num_movies(self) -> int:
        return len(self.movies)

    def user_ids(self) -> list[int]:
        return sorted({r.user_id for r in self.ratings})

    def movie(self, movie_id: int) -> Optional[Movie]:
        return self._movies_by_id.get(movie_id)


class TrainingEvent(NamedTuple):
    epoch: int
    loss: Optional[float]
    val_loss: Optional[float]


@dataclass
class TrainingHistory:
    losses: list[Optional[float]] = field(default_factory=list)
    val_losses: list[Optional[float]] = field(default_factory=list)

    @property
    def epochs(self) -> int:
        return len(self.losses)

    def append(self, event: TrainingEvent) -> None:
        self.losses.append(event.loss)
        self.val_losses.append(event.val_loss)


class Prediction(NamedTuple):
    user_id: int
    movie_id: int
    title: str
    rating: float
    raw_rating: float
    stars: str
