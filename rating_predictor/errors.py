"""
Exceptions raised while loading data, training and predicting.
"""


class RatingPredictorError(Exception):
    """Base class for all errors raised by this package."""


class DataUnavailable(RatingPredictorError):
    """No data source produced the catalog and ratings text."""


class TrainingFailure(RatingPredictorError):
    """Training was aborted by invalid input or a backend error."""


class ModelBusy(TrainingFailure):
    """A training run is already in progress for this model."""


class ModelNotReady(RatingPredictorError):
    """Prediction was requested before training finished."""


class InvalidSelection(RatingPredictorError):
    """The requested user or movie is missing or out of range."""
