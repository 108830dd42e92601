"""
Helper script that loads a dataset, trains the MF model and optionally predicts a rating.

Examples:
    python scripts/train_mf.py --source embedded --user 1 --movie 20
    python scripts/train_mf.py --source local --data-dir ./data/ml-100k --epochs 4
"""

import argparse
import asyncio
import random

from rating_predictor.config import Settings
from rating_predictor.data.loader import load_dataset, load_raw_text
from rating_predictor.logger import logger
from rating_predictor.pipeline import (StatusReporter, predict_for_display,
                                       train_recommender)


def build_arg_parser() -> argparse.ArgumentParser:
    defaults = Settings.from_env()
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--source",
        choices=["remote", "embedded", "local"],
        default=defaults.data_source if defaults.data_source != "upload" else "remote",
    )
    parser.add_argument("--data-dir", default=str(defaults.data_dir))
    parser.add_argument(
        "--fallback",
        action="store_true",
        default=defaults.fallback_to_sample,
        help="use the embedded sample when the source fails",
    )
    parser.add_argument("--latent-dim", type=int, default=defaults.latent_dim)
    parser.add_argument("--epochs", type=int, default=defaults.epochs)
    parser.add_argument("--batch-size", type=int, default=defaults.batch_size)
    parser.add_argument("--validation-split", type=float, default=defaults.validation_split)
    parser.add_argument("--lr", type=float, default=defaults.learning_rate)
    parser.add_argument("--seed", type=int, default=defaults.seed if defaults.seed is not None else 42)
    parser.add_argument("--user", type=int, help="user ID to predict a rating for")
    parser.add_argument("--movie", type=int, help="movie ID to predict a rating for")
    return parser


async def main():
    args = build_arg_parser().parse_args()
    random.seed(args.seed)

    settings = Settings(
        data_source=args.source,
        data_dir=args.data_dir,
        fallback_to_sample=args.fallback,
        latent_dim=args.latent_dim,
        epochs=args.epochs,
        batch_size=args.batch_size,
        validation_split=args.validation_split,
        learning_rate=args.lr,
        seed=args.seed,
    )
    dataset = load_dataset(await load_raw_text(settings))
    recommender, history = train_recommender(dataset, settings, StatusReporter())
    logger.info(f"final loss = {history.losses[-1]} | validation loss = {history.val_losses[-1]}")

    if args.user is not None and args.movie is not None:
        prediction = predict_for_display(recommender, dataset, args.user, args.movie)
        logger.info(
            f"{prediction.title}: user {prediction.user_id} -> {prediction.rating:.2f} {prediction.stars}"
        )


if __name__ == "__main__":
    asyncio.run(main())
