"""Evaluation subpackage exports.

Provides a clean import surface:

	from claims_xai.evaluation import evaluate_predictions, poisson_deviance

Avoid importing analysis scripts here to keep dependency one-way (library -> analyses).
"""

from ._evaluate_predictions import evaluate_predictions
from ._metrics import gini_index, mean_absolute_error, mean_squared_error, poisson_deviance

__all__ = [
    "evaluate_predictions",
    "gini_index",
    "mean_absolute_error",
    "mean_squared_error",
    "poisson_deviance",
]
