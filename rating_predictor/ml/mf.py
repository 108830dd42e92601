"""
Matrix Factorization (MF) rating model.
"""

# pylint: disable=no-member
import enum
import math
from typing import Iterator, Optional

import numpy as np
import torch
from sklearn.model_selection import train_test_split
from torch import nn
from torch.utils.data import DataLoader, TensorDataset

from rating_predictor.errors import (InvalidSelection, ModelBusy,
                                     ModelNotReady, TrainingFailure)
from rating_predictor.logger import logger
from rating_predictor.models import Rating, TrainingEvent, TrainingHistory


class MF(nn.Module):
    def __init__(self, n_users: int, n_items: int, emb_dim: int):
        super().__init__()
        self.user_emb = nn.Embedding(n_users, emb_dim)
        self.item_emb = nn.Embedding(n_items, emb_dim)
        self.user_bias = nn.Embedding(n_users, 1)
        self.item_bias = nn.Embedding(n_items, 1)
        nn.init.normal_(self.user_emb.weight, 0, 0.1)
        nn.init.normal_(self.item_emb.weight, 0, 0.1)
        nn.init.zeros_(self.user_bias.weight)
        nn.init.zeros_(self.item_bias.weight)

    def forward(self, users, items):
        users_emb = self.user_emb(users)
        items_emb = self.item_emb(items)
        users_bias = self.user_bias(users).squeeze(-1)
        items_bias = self.item_bias(items).squeeze(-1)
        return (users_emb * items_emb).sum(-1) + users_bias + items_bias


class ModelState(enum.Enum):
    UNTRAINED = "untrained"
    TRAINING = "training"
    TRAINED = "trained"


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def split_validation(
    ratings: list[Rating], validation_split: float
) -> tuple[list[Rating], list[Rating]]:
    """Hold out the last `validation_split` fraction of ratings, keeping their order."""
    if validation_split <= 0 or len(ratings) < 2:
        return list(ratings), []
    train, validation = train_test_split(ratings, test_size=validation_split, shuffle=False)
    return train, validation


def _to_tensors(ratings: list[Rating]) -> TensorDataset:
    users = torch.from_numpy(np.array([r.user_id for r in ratings], dtype=np.int64))
    items = torch.from_numpy(np.array([r.movie_id for r in ratings], dtype=np.int64))
    scores = torch.from_numpy(np.array([r.rating for r in ratings], dtype=np.float32))
    return TensorDataset(users, items, scores)


class Recommender:
    """
    Latent factor model predicting `dot(user, movie) + user bias + movie bias`.

    Source ids are 1-based, so every table gets one extra row and index 0 is never used.
    """

    def __init__(
        self,
        num_users: int,
        num_movies: int,
        latent_dim: int = 10,
        learning_rate: float = 1e-3,
        seed: Optional[int] = None,
    ):
        if num_users < 1 or num_movies < 1:
            raise ValueError("a model needs at least one user and one movie")
        self.num_users = num_users
        self.num_movies = num_movies
        self.latent_dim = latent_dim
        self.learning_rate = learning_rate
        self.seed = seed
        self.device = torch.device("cuda") if torch.cuda.is_available() else torch.device("cpu")
        self.state = ModelState.UNTRAINED
        self.history: Optional[TrainingHistory] = None
        self.model = self._new_model()

    @property
    def user_rows(self) -> int:
        return self.num_users + 1

    @property
    def movie_rows(self) -> int:
        return self.num_movies + 1

    @property
    def is_training(self) -> bool:
        return self.state is ModelState.TRAINING

    @property
    def is_trained(self) -> bool:
        return self.state is ModelState.TRAINED

    def _new_model(self) -> MF:
        if self.seed is not None:
            torch.random.manual_seed(self.seed)
        return MF(self.user_rows, self.movie_rows, self.latent_dim).to(self.device)

    def _check_ratings(self, ratings: list[Rating]) -> None:
        if not ratings:
            raise TrainingFailure("no ratings to train on")
        for r in ratings:
            if not 0 <= r.user_id < self.user_rows:
                raise TrainingFailure(
                    f"rating references user {r.user_id} but the model only has {self.num_users} users"
                )
            if not 0 <= r.movie_id < self.movie_rows:
                raise TrainingFailure(
                    f"rating references movie {r.movie_id} but the model only has {self.num_movies} movies"
                )

    def _run_epoch(self, loader, optimizer, loss_fn) -> float:
        self.model.train()
        loss_acc = count = 0
        for users, items, scores in loader:
            users = users.to(self.device)
            items = items.to(self.device)
            scores = scores.to(self.device)
            optimizer.zero_grad()
            loss = loss_fn(self.model(users, items), scores)
            loss.backward()
            optimizer.step()
            loss_acc += loss.item() * len(scores)
            count += len(scores)
        return loss_acc / count

    @torch.no_grad()
    def _evaluate(self, loader, loss_fn) -> Optional[float]:
        self.model.eval()
        loss_acc = count = 0
        for users, items, scores in loader:
            pred = self.model(users.to(self.device), items.to(self.device))
            loss_acc += loss_fn(pred, scores.to(self.device)).item() * len(scores)
            count += len(scores)
        return loss_acc / count if count else None

    def iter_train(
        self,
        ratings: list[Rating],
        epochs: int = 8,
        batch_size: int = 64,
        validation_split: float = 0.1,
    ) -> Iterator[TrainingEvent]:
        """
        Train from scratch, yielding one `TrainingEvent` per finished epoch.

        Raises `ModelBusy` when another run on this model has not finished yet,
        and `TrainingFailure` for invalid ratings or backend errors.
        """
        if self.is_training:
            raise ModelBusy("model is already training, wait for it to finish")
        self._check_ratings(ratings)

        self.state = ModelState.TRAINING
        try:
            self.model = self._new_model()
            train_ratings, val_ratings = split_validation(ratings, validation_split)
            train_loader = DataLoader(_to_tensors(train_ratings), batch_size=batch_size, shuffle=True)
            val_loader = (
                DataLoader(_to_tensors(val_ratings), batch_size=batch_size, shuffle=False)
                if val_ratings
                else None
            )
            optimizer = torch.optim.Adam(self.model.parameters(), lr=self.learning_rate)
            loss_fn = nn.MSELoss()
            history = TrainingHistory()
            logger.info(
                f"training MF model on {len(train_ratings)} ratings, "
                f"validating on {len(val_ratings)}, {epochs} epochs"
            )

            for epoch in range(epochs):
                loss = _finite_or_none(self._run_epoch(train_loader, optimizer, loss_fn))
                val_loss = self._evaluate(val_loader, loss_fn) if val_loader is not None else None
                val_loss = _finite_or_none(val_loss) if val_loss is not None else None
                event = TrainingEvent(epoch=epoch, loss=loss, val_loss=val_loss)
                history.append(event)
                logger.debug(f"epoch {epoch + 1}/{epochs} -> loss = {loss} | val loss = {val_loss}")
                yield event
        except (RuntimeError, ValueError) as exc:
            logger.error(f"training failed: {exc}")
            raise TrainingFailure(str(exc)) from exc
        finally:
            # reached on success, on failure and when the caller abandons the iterator
            if self.state is ModelState.TRAINING:
                self.state = ModelState.UNTRAINED

        self.history = history
        self.state = ModelState.TRAINED

    def train(
        self,
        ratings: list[Rating],
        epochs: int = 8,
        batch_size: int = 64,
        validation_split: float = 0.1,
    ) -> TrainingHistory:
        for _ in self.iter_train(ratings, epochs, batch_size, validation_split):
            pass
        return self.history

    def predict(self, user_id: int, movie_id: int) -> float:
        """Predict the raw, unclamped rating of `user_id` for `movie_id`."""
        # a retrain swaps `self.model` only after leaving TRAINED, so take it first
        model = self.model
        if not self.is_trained:
            raise ModelNotReady("model is not trained yet, please wait for training to finish")
        if not 0 <= user_id < self.user_rows:
            raise InvalidSelection(f"unknown user {user_id}")
        if not 0 <= movie_id < self.movie_rows:
            raise InvalidSelection(f"unknown movie {movie_id}")

        model.eval()
        with torch.inference_mode():
            users = torch.tensor([user_id], dtype=torch.long, device=self.device)
            items = torch.tensor([movie_id], dtype=torch.long, device=self.device)
            return float(model(users, items)[0])


def build_recommender(
    num_users: int,
    num_movies: int,
    latent_dim: int = 10,
    learning_rate: float = 1e-3,
    seed: Optional[int] = None,
) -> Recommender:
    logger.info(f"building MF model: {num_users} users, {num_movies} movies, {latent_dim} latent dims")
    return Recommender(num_users, num_movies, latent_dim, learning_rate, seed)
