"""Breakdown and approximate SHAP decomposition of a single prediction.

A working copy of the background sample starts with every row at its own
covariate values. Visiting the covariates one by one, the instance value is
written into the whole column and the change of the average prediction is
booked on that covariate. Once all covariates are visited every row equals
the instance, so baseline + contributions = prediction by construction.

Averaging the contributions over random visiting orders approximates the
Shapley values.
"""

import logging
import numbers

import numpy as np
import pandas as pd

from ._errors import InputError
from ._results import BreakdownResult
from ._sampling import DEFAULT_N_MAX, broadcast, resolve_seed, rng_for, sample_rows

logger = logging.getLogger(__name__)

STRATEGIES = ("fixed_order", "permutation_average")


def _visit(explainer, work, row, order, baseline):
    """Contributions of one visiting order; ``work`` is modified in place."""
    contributions = {}
    previous = baseline
    for covariate in order:
        work[covariate] = broadcast(row[covariate], work.index)
        current = explainer._predict(work).mean()
        contributions[covariate] = current - previous
        previous = current
    return contributions, previous


def _format_value(value):
    if isinstance(value, (float, np.floating)):
        return f"{value:.4g}"
    return str(value)


def breakdown(
    explainer,
    instance,
    covariates=None,
    background=None,
    strategy="fixed_order",
    n_perm=16,
    seed=None,
    n_max=DEFAULT_N_MAX,
):
    """Decompose the prediction of ``instance`` into covariate contributions.

    Parameters
    ----------
    explainer : Explainer
    instance : pd.DataFrame, pd.Series or dict
        The row to explain. Must hold every column of the explainer data.
    covariates : sequence of str, optional
        Visiting order for ``fixed_order``, or the covariates to permute for
        ``permutation_average``. Defaults to all columns. Columns left out
        are set to the instance value before the baseline is computed.
    background : pd.DataFrame, optional
        Rows standing in for "unknown" covariate values. Defaults to the
        explainer data. At most ``n_max`` rows are used.
    strategy : {"fixed_order", "permutation_average"}
    n_perm : int
        Number of random visiting orders for ``permutation_average``.
    seed : int, optional
        Seeds the background sample and the visiting orders.
    n_max : int, optional
        Cap on the number of background rows, the main cost driver.

    Returns
    -------
    BreakdownResult
        The model is called ``1 + n_perm * len(covariates)`` times (with
        ``n_perm = 1`` for ``fixed_order``), each time on the background.
    """
    if strategy not in STRATEGIES:
        raise InputError(f"strategy must be one of {STRATEGIES}, got {strategy!r}")
    if strategy == "fixed_order":
        n_perm = 1
    elif isinstance(n_perm, bool) or not isinstance(n_perm, numbers.Integral) or n_perm < 1:
        raise InputError(f"n_perm must be a positive integer, got {n_perm!r}")
    seed = resolve_seed(seed)

    row = explainer._as_row(instance)
    if background is None:
        background = explainer.data
    elif not isinstance(background, pd.DataFrame):
        raise InputError(f"background must be a DataFrame, got {type(background).__name__}")
    if len(background) == 0:
        raise InputError("background sample is empty, no baseline can be formed")
    covariates = explainer._check_covariates(covariates, row, background)
    missing = [c for c in explainer.covariates if c not in background.columns]
    if missing:
        raise InputError(f"background lacks column(s): {missing}")

    background = sample_rows(background[explainer.covariates], n_max, seed)
    start = background.copy()
    for covariate in explainer.covariates:
        if covariate not in covariates:
            start[covariate] = broadcast(row[covariate], start.index)

    baseline = explainer._predict(start).mean()
    n_evaluations = 1

    runs = []
    prediction = baseline
    for k in range(n_perm):
        if strategy == "fixed_order":
            order = covariates
        else:
            order = [covariates[i] for i in rng_for(seed, k).permutation(len(covariates))]
        contributions, prediction = _visit(explainer, start.copy(), row, order, baseline)
        runs.append([contributions[c] for c in covariates])
        n_evaluations += len(order)

    runs = np.asarray(runs)
    result = pd.DataFrame(
        {
            "variable": covariates,
            "variable_value": [_format_value(row[c].iloc[0]) for c in covariates],
            "contribution": runs.mean(axis=0),
        }
    )
    if strategy == "permutation_average":
        result["std"] = runs.std(axis=0, ddof=1) if n_perm > 1 else 0.0
        result = (
            result.assign(_size=-result["contribution"].abs())
            .sort_values(["_size", "variable"], kind="mergesort")
            .drop(columns="_size")
            .reset_index(drop=True)
        )

    logger.info(
        "%s: %s of one prediction over %d background rows (%d model calls)",
        explainer.label,
        strategy,
        len(background),
        n_evaluations,
    )
    return BreakdownResult(
        result=result,
        baseline=float(baseline),
        prediction=float(prediction),
        strategy=strategy,
        n_perm=n_perm,
        n_evaluations=n_evaluations,
        label=explainer.label,
    )
