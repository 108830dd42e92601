from fastapi.concurrency import run_in_threadpool

from rating_predictor.errors import TrainingFailure
from rating_predictor.logger import logger
from rating_predictor.ml.mf import build_recommender
from rating_predictor.pipeline import train_recommender


async def background_full_training(state, retrain: bool = False) -> None:
    """
    Train a model on `state.dataset` without blocking the event loop.

    The caller sets `state.busy` before scheduling this task, it is cleared
    here whatever the outcome.
    """
    try:
        dataset, settings = state.dataset, state.settings
        if retrain and state.recommender is not None:
            recommender = state.recommender
        else:
            recommender = build_recommender(
                dataset.num_users,
                dataset.num_movies,
                latent_dim=settings.latent_dim,
                learning_rate=settings.learning_rate,
                seed=settings.seed,
            )
            state.recommender = recommender
        logger.info("training a full MF model in the background")
        await run_in_threadpool(
            train_recommender, dataset, settings, state.reporter, recommender
        )
    except TrainingFailure as exc:
        state.reporter.update(f"Error: {exc}", 0)
    finally:
        state.busy = False
