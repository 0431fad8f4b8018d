"""
Evaluation metrics for claims-frequency models.

This module provides a reusable function to compute the performance summary
used to compare the GLM, the boosted trees and the network.
"""

import numpy as np
import pandas as pd

from ._metrics import gini_index, mean_absolute_error, poisson_deviance


def evaluate_predictions(y_true, y_pred, sample_weight, label="value"):
    """
    Evaluate frequency predictions with insurance-specific metrics.

    Parameters
    ----------
    y_true : array-like
        Observed claim frequencies (ClaimNb / Exposure)
    y_pred : array-like
        Predicted claim frequencies (same shape as y_true)
    sample_weight : array-like
        Exposure (fraction of year the policy was active)
    label : str, optional
        Column name of the returned frame, typically the model name.

    Returns
    -------
    pd.DataFrame
        One column indexed by metric name:
        - 'deviance': exposure-weighted mean Poisson deviance
        - 'gini': Gini index from the Lorenz curve (0=random)
        - 'mae': exposure-weighted mean absolute error
        - 'bias': weighted mean prediction minus weighted mean response
        - 'total_actual': observed number of claims
        - 'total_predicted': predicted number of claims

    Examples
    --------
    >>> metrics = evaluate_predictions(y_test, glm.predict(X_test), w_test, label="GLM")
    >>> metrics.loc["gini", "GLM"]
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    sample_weight = np.asarray(sample_weight, dtype=float)

    metrics = {
        "deviance": poisson_deviance(y_true, y_pred, sample_weight),
        "gini": gini_index(y_true, y_pred, sample_weight),
        "mae": mean_absolute_error(y_true, y_pred, sample_weight),
        # positive bias = model over-predicts the portfolio frequency
        "bias": np.average(y_pred, weights=sample_weight)
        - np.average(y_true, weights=sample_weight),
        # frequencies times exposure are claim counts
        "total_actual": np.sum(y_true * sample_weight),
        "total_predicted": np.sum(y_pred * sample_weight),
    }

    return pd.DataFrame.from_dict(metrics, orient="index", columns=[label])
