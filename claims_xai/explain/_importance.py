import logging
import numbers

import numpy as np
import pandas as pd

from ..evaluation import poisson_deviance
from ._errors import ComputationError, InputError
from ._results import ImportanceResult
from ._sampling import resolve_seed, rng_for

logger = logging.getLogger(__name__)


def _loss(metric, y, pred, weights):
    name = getattr(metric, "__name__", metric)
    try:
        value = float(metric(y, pred, weights))
    except (ValueError, ArithmeticError) as e:
        raise ComputationError(f"metric {name} failed: {e}") from e
    if not np.isfinite(value):
        raise ComputationError(f"metric {name} returned {value}")
    return value


def permutation_importance(explainer, covariates=None, metric=poisson_deviance, n_repeats=4, seed=None):
    """Loss increase when one covariate is shuffled across rows.

    For each covariate and repeat, a copy of the data with that column
    permuted is scored and ``metric(y, pred, weights)`` is compared to the
    loss on the untouched data. The generator of a (covariate, repeat) is
    seeded from ``seed``, the column position and the repeat number, so the
    numbers do not depend on which other covariates are requested.

    Parameters
    ----------
    explainer : Explainer
    covariates : iterable of str, optional
        Defaults to all columns of the data.
    metric : callable
        Loss with signature ``metric(y_true, y_pred, weights)``, smaller is
        better.
    n_repeats : int
        Number of shuffles per covariate.
    seed : int, optional

    Returns
    -------
    ImportanceResult
    """
    if explainer.y is None:
        raise InputError("importance needs the observed response y")
    if isinstance(n_repeats, bool) or not isinstance(n_repeats, numbers.Integral) or n_repeats < 1:
        raise InputError(f"n_repeats must be a positive integer, got {n_repeats!r}")
    n_repeats = int(n_repeats)
    covariates = explainer._check_covariates(covariates)
    seed = resolve_seed(seed)

    data = explainer.data
    y, weights = explainer.y, explainer.weights
    n = len(data)

    baseline = _loss(metric, y, explainer._predict(data), weights)
    logger.debug("%s: baseline loss %.6g", explainer.label, baseline)

    rows = []
    for covariate in covariates:
        position = data.columns.get_loc(covariate)
        original = data[covariate]
        shuffled = data.copy()
        increases = np.empty(n_repeats)
        for repeat in range(n_repeats):
            perm = rng_for(seed, position, repeat).permutation(n)
            shuffled[covariate] = original.iloc[perm].array
            increases[repeat] = _loss(metric, y, explainer._predict(shuffled), weights) - baseline
        rows.append(
            {
                "variable": covariate,
                "importance": increases.mean(),
                "std": increases.std(ddof=1) if n_repeats > 1 else 0.0,
            }
        )

    result = (
        pd.DataFrame(rows, columns=["variable", "importance", "std"])
        .sort_values(["importance", "variable"], ascending=[False, True], kind="mergesort")
        .reset_index(drop=True)
    )
    logger.info(
        "%s: permutation importance of %d covariates (%d repeats, %d model calls)",
        explainer.label,
        len(covariates),
        n_repeats,
        1 + len(covariates) * n_repeats,
    )
    return ImportanceResult(
        result=result,
        baseline_loss=baseline,
        metric=getattr(metric, "__name__", repr(metric)),
        n_repeats=n_repeats,
        label=explainer.label,
    )
