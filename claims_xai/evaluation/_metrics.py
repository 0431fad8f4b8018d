"""Loss functions with the ``metric(y_true, y_pred, weights)`` signature.

These are the metric collaborators of the explainer: smaller is better and
the case weights (exposure) are passed positionally as the third argument.
"""

import numpy as np
from sklearn import metrics as skm


def poisson_deviance(y_true, y_pred, weights=None):
    """Exposure-weighted mean Poisson deviance of claim frequencies."""
    return skm.mean_poisson_deviance(y_true, y_pred, sample_weight=weights)


def mean_squared_error(y_true, y_pred, weights=None):
    return skm.mean_squared_error(y_true, y_pred, sample_weight=weights)


def mean_absolute_error(y_true, y_pred, weights=None):
    return skm.mean_absolute_error(y_true, y_pred, sample_weight=weights)


def gini_index(y_true, y_pred, weights=None):
    """Exposure-weighted Gini index from the Lorenz curve.

    Policies are ordered from the lowest to the highest predicted frequency;
    the index is 1 - 2 * area under the curve of cumulative claims against
    cumulative exposure. 0 means random ranking.
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    weights = np.ones_like(y_true) if weights is None else np.asarray(weights, dtype=float)

    ranking = np.argsort(y_pred, kind="stable")
    ranked_weight = weights[ranking]
    cumulative_claims = np.cumsum(y_true[ranking] * ranked_weight)
    total_claims = cumulative_claims[-1]

    if total_claims > 0:
        cumulative_claims = cumulative_claims / total_claims
    else:
        cumulative_claims = np.zeros_like(cumulative_claims)

    cumulative_exposure = np.cumsum(ranked_weight) / np.sum(ranked_weight)

    # prepend the origin so that the curve starts at (0, 0)
    x = np.concatenate(([0.0], cumulative_exposure))
    y = np.concatenate(([0.0], cumulative_claims))
    return 1 - 2 * skm.auc(x, y)
