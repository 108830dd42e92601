"""
Glue between loading, training and displaying predictions.
"""

import math
from typing import Optional

from rating_predictor.config import Settings
from rating_predictor.errors import InvalidSelection
from rating_predictor.logger import logger
from rating_predictor.ml.mf import Recommender, build_recommender
from rating_predictor.models import Dataset, Prediction, TrainingHistory

MIN_RATING = 0.5
MAX_RATING = 5.0

TRAINING_START_PROGRESS = 60
TRAINING_END_PROGRESS = 100


class StatusReporter:
    """Latest status message and progress (0-100) shown to the user."""

    def __init__(self, message: str = "", progress: int = 0):
        self.message = message
        self.progress = progress

    def update(self, message: str, progress: int) -> None:
        self.message = message
        self.progress = max(0, min(100, int(progress)))
        logger.info(f"[{self.progress:3d}%] {message}")

    def as_dict(self) -> dict:
        return {"message": self.message, "progress": self.progress}


def clamp_rating(value: float) -> float:
    return min(MAX_RATING, max(MIN_RATING, value))


def render_stars(rating: float, max_stars: int = 5) -> str:
    """Render a rating as full, half and empty stars, rounded to the nearest half star."""
    halves = math.floor(rating * 2 + 0.5)
    full, half = divmod(halves, 2)
    return "★" * full + "½" * half + "☆" * (max_stars - full - half)


def _format_loss(loss: Optional[float]) -> str:
    return f"{loss:.4f}" if loss is not None else "n/a"


def train_recommender(
    dataset: Dataset,
    settings: Settings,
    reporter: StatusReporter,
    recommender: Optional[Recommender] = None,
) -> tuple[Recommender, TrainingHistory]:
    """(Re)train a model on `dataset`, reporting one status update per epoch."""
    if recommender is None:
        recommender = build_recommender(
            dataset.num_users,
            dataset.num_movies,
            latent_dim=settings.latent_dim,
            learning_rate=settings.learning_rate,
            seed=settings.seed,
        )

    reporter.update("Starting model training...", TRAINING_START_PROGRESS)
    span = TRAINING_END_PROGRESS - TRAINING_START_PROGRESS
    events = recommender.iter_train(
        dataset.ratings,
        epochs=settings.epochs,
        batch_size=settings.batch_size,
        validation_split=settings.validation_split,
    )
    for event in events:
        done = event.epoch + 1
        reporter.update(
            f"Training epoch {done}/{settings.epochs}, loss: {_format_loss(event.loss)}",
            TRAINING_START_PROGRESS + span * done // settings.epochs,
        )
    reporter.update("Model trained and ready for predictions!", TRAINING_END_PROGRESS)
    return recommender, recommender.history


def predict_for_display(
    recommender: Recommender,
    dataset: Dataset,
    user_id: Optional[int],
    movie_id: Optional[int],
) -> Prediction:
    if user_id is None or movie_id is None:
        raise InvalidSelection("please select both a user and a movie")
    movie = dataset.movie(movie_id)
    if movie is None:
        raise InvalidSelection(f"movie {movie_id} is not in the catalog")

    raw_rating = recommender.predict(user_id, movie_id)
    rating = clamp_rating(raw_rating)
    return Prediction(
        user_id=user_id,
        movie_id=movie_id,
        title=movie.full_title,
        rating=round(rating, 2),
        raw_rating=raw_rating,
        stars=render_stars(rating),
    )
