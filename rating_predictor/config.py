"""
Runtime settings read from environment variables.
"""

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field

MOVIES_URL = "https://raw.githubusercontent.com/tensorflow/tfjs-examples/master/recommendation/data/movielens100k/u.item"
RATINGS_URL = "https://raw.githubusercontent.com/tensorflow/tfjs-examples/master/recommendation/data/movielens100k/u.data"

ENV_PREFIX = "RP_"
_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    data_source: Literal["remote", "embedded", "local", "upload"] = "remote"
    movies_url: str = MOVIES_URL
    ratings_url: str = RATINGS_URL
    data_dir: Path = Path(".")
    fallback_to_sample: bool = False
    fetch_timeout: float = Field(default=30.0, gt=0)

    latent_dim: int = Field(default=10, ge=1)
    epochs: int = Field(default=8, ge=1)
    batch_size: int = Field(default=64, ge=1)
    validation_split: float = Field(default=0.1, ge=0.0, lt=1.0)
    learning_rate: float = Field(default=1e-3, gt=0)
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            if name == "fallback_to_sample":
                values[name] = raw.strip().lower() in _TRUE_VALUES
            else:
                values[name] = raw
        return cls(**values)
