import math

import pytest
import torch

from rating_predictor.data.sample import SAMPLE_RATINGS
from rating_predictor.errors import (InvalidSelection, ModelBusy,
                                     ModelNotReady, TrainingFailure)
from rating_predictor.ml.mf import (MF, ModelState, Recommender,
                                    build_recommender, split_validation)
from rating_predictor.models import Rating
from rating_predictor.parsing import parse_ratings
from rating_predictor.pipeline import clamp_rating

SMALL_RATINGS = [Rating(1, 1, 5.0), Rating(1, 2, 3.0), Rating(2, 1, 4.0)]


def _sample_ratings() -> list[Rating]:
    ratings, _ = parse_ratings(SAMPLE_RATINGS)
    return ratings


def test_predict_before_training():
    recommender = build_recommender(2, 2, latent_dim=2)
    with pytest.raises(ModelNotReady):
        recommender.predict(1, 1)


def test_small_scenario():
    recommender = build_recommender(2, 2, latent_dim=2, seed=0)
    history = recommender.train(SMALL_RATINGS, epochs=1)
    assert history.epochs == 1
    pred = recommender.predict(1, 1)
    assert isinstance(pred, float)
    assert math.isfinite(pred)


def test_table_shapes_reserve_index_zero():
    recommender = build_recommender(3, 5, latent_dim=4)
    assert recommender.model.user_emb.weight.shape == (4, 4)
    assert recommender.model.item_emb.weight.shape == (6, 4)
    assert recommender.model.user_bias.weight.shape == (4, 1)
    assert recommender.model.item_bias.weight.shape == (6, 1)


def test_prediction_clamps_into_range():
    recommender = build_recommender(10, 20, seed=42)
    recommender.train(_sample_ratings(), epochs=2, batch_size=8)
    for rating in _sample_ratings()[:10]:
        pred = recommender.predict(rating.user_id, rating.movie_id)
        assert math.isfinite(pred)
        assert 0.5 <= clamp_rating(pred) <= 5.0


def test_training_reduces_loss():
    recommender = build_recommender(10, 20, seed=1)
    recommender.learning_rate = 0.05
    history = recommender.train(_sample_ratings(), epochs=20, batch_size=16)
    assert history.losses[-1] < history.losses[0]


def test_iter_train_yields_one_event_per_epoch():
    recommender = build_recommender(10, 20, seed=0)
    events = list(recommender.iter_train(_sample_ratings(), epochs=3, validation_split=0.2))
    assert [e.epoch for e in events] == [0, 1, 2]
    assert all(e.loss is not None for e in events)
    assert all(e.val_loss is not None for e in events)
    assert recommender.state is ModelState.TRAINED


def test_no_validation_loss_without_split():
    recommender = build_recommender(2, 2, latent_dim=2)
    history = recommender.train(SMALL_RATINGS, epochs=2, validation_split=0.0)
    assert history.val_losses == [None, None]


def test_split_validation_holds_out_tail():
    ratings = [Rating(u, 1, 3.0) for u in range(1, 11)]
    train, validation = split_validation(ratings, 0.1)
    assert train == ratings[:9]
    assert validation == ratings[9:]


def test_split_validation_small_inputs():
    train, validation = split_validation(SMALL_RATINGS[:1], 0.1)
    assert train == SMALL_RATINGS[:1]
    assert validation == []


def test_concurrent_training_rejected():
    recommender = build_recommender(10, 20)
    running = recommender.iter_train(_sample_ratings(), epochs=3)
    next(running)
    assert recommender.state is ModelState.TRAINING
    with pytest.raises(ModelBusy):
        recommender.train(_sample_ratings(), epochs=1)
    with pytest.raises(ModelNotReady):
        recommender.predict(1, 1)
    # the first run is unaffected
    remaining = list(running)
    assert len(remaining) == 2
    assert recommender.state is ModelState.TRAINED


def test_abandoned_training_clears_busy_flag():
    recommender = build_recommender(10, 20)
    running = recommender.iter_train(_sample_ratings(), epochs=3)
    next(running)
    running.close()
    assert recommender.state is ModelState.UNTRAINED
    recommender.train(_sample_ratings(), epochs=1)
    assert recommender.is_trained


def test_retrain_resets_parameters():
    recommender = build_recommender(2, 2, latent_dim=2)
    recommender.train(SMALL_RATINGS, epochs=1)
    first = recommender.model
    recommender.train(SMALL_RATINGS, epochs=1)
    assert recommender.model is not first
    assert recommender.is_trained


def test_out_of_range_ids_fail_fast():
    recommender = build_recommender(2, 2, latent_dim=2)
    with pytest.raises(TrainingFailure):
        recommender.train([Rating(3, 1, 4.0)], epochs=1)
    with pytest.raises(TrainingFailure):
        recommender.train([Rating(1, 7, 4.0)], epochs=1)
    assert recommender.state is ModelState.UNTRAINED


def test_empty_ratings_fail():
    recommender = build_recommender(2, 2)
    with pytest.raises(TrainingFailure):
        recommender.train([], epochs=1)


def test_predict_unknown_ids():
    recommender = build_recommender(2, 2, latent_dim=2)
    recommender.train(SMALL_RATINGS, epochs=1)
    with pytest.raises(InvalidSelection):
        recommender.predict(99, 1)
    with pytest.raises(InvalidSelection):
        recommender.predict(1, -1)


def test_backend_error_becomes_training_failure(monkeypatch):
    def _broken_adam(*args, **kwargs):
        raise RuntimeError("optimizer exploded")

    monkeypatch.setattr(torch.optim, "Adam", _broken_adam)
    recommender = build_recommender(2, 2, latent_dim=2)
    with pytest.raises(TrainingFailure, match="optimizer exploded"):
        recommender.train(SMALL_RATINGS, epochs=1)
    assert recommender.state is ModelState.UNTRAINED


def test_predict_uses_model_from_before_retrain_swap(monkeypatch):
    recommender = build_recommender(2, 2, latent_dim=2, seed=0)
    recommender.train(SMALL_RATINGS, epochs=1)
    expected = recommender.predict(1, 1)

    def _retrain_starts_during_check(self):
        # the check still sees TRAINED while a retrain replaces the module
        self.model = MF(self.user_rows, self.movie_rows, self.latent_dim).to(self.device)
        with torch.no_grad():
            self.model.user_emb.weight.fill_(3.0)
        return True

    monkeypatch.setattr(Recommender, "is_trained", property(_retrain_starts_during_check))
    assert recommender.predict(1, 1) == expected
