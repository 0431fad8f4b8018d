"""Effect profiles and interaction strength.

All three methods evaluate the model on stacked copies of a background
sample in one batch per covariate (or pair), then average.
"""

import itertools
import logging
import numbers

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from ._errors import InputError
from ._results import InteractionResult, ProfileResult
from ._sampling import DEFAULT_N_MAX, resolve_seed, sample_rows

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 20


def _is_numeric(column):
    return is_numeric_dtype(column) and not is_bool_dtype(column)


def _check_grid_size(grid_size):
    if isinstance(grid_size, bool) or not isinstance(grid_size, numbers.Integral) or grid_size < 1:
        raise InputError(f"grid_size must be a positive integer, got {grid_size!r}")
    return int(grid_size)


def _grid(column, grid_size):
    """Evaluation points of a covariate.

    Numeric columns: the sorted unique values if there are at most
    ``grid_size`` of them, else observed values at evenly spaced quantiles.
    Other columns: all observed levels.
    """
    values = column.dropna()
    if hasattr(values, "cat"):
        observed = set(values.unique())
        return pd.Series([c for c in values.cat.categories if c in observed], dtype=column.dtype)
    if not _is_numeric(values):
        return pd.Series(sorted(values.unique()), dtype=column.dtype)
    unique = np.unique(values.to_numpy())
    if len(unique) > grid_size:
        probs = np.linspace(0, 1, grid_size)
        unique = np.unique(np.quantile(values.to_numpy(), probs, method="inverted_cdf"))
    return pd.Series(unique).astype(column.dtype)


def _stack(frame, times):
    return frame.iloc[np.tile(np.arange(len(frame)), times)].reset_index(drop=True)


def _profile_frame(rows):
    return pd.DataFrame(rows, columns=["variable", "grid", "value"])


def partial_dependence(explainer, covariates=None, grid_size=DEFAULT_GRID_SIZE, n_max=DEFAULT_N_MAX, seed=None):
    """Average prediction with one covariate set to each grid value.

    Returns
    -------
    ProfileResult
        ``kind="partial_dependence"``.
    """
    covariates = explainer._check_covariates(covariates)
    grid_size = _check_grid_size(grid_size)
    background = sample_rows(explainer.data, n_max, resolve_seed(seed))
    n = len(background)

    rows = []
    for covariate in covariates:
        grid = _grid(explainer.data[covariate], grid_size)
        stacked = _stack(background, len(grid))
        stacked[covariate] = grid.iloc[np.repeat(np.arange(len(grid)), n)].reset_index(drop=True)
        values = explainer._predict(stacked).reshape(len(grid), n).mean(axis=1)
        rows.extend(zip(itertools.repeat(covariate), grid.tolist(), values))
        logger.debug("%s: partial dependence of %s on %d grid points", explainer.label, covariate, len(grid))

    return ProfileResult(result=_profile_frame(rows), kind="partial_dependence", label=explainer.label)


def accumulated_local_effects(
    explainer, covariates=None, grid_size=DEFAULT_GRID_SIZE, n_max=DEFAULT_N_MAX, seed=None
):
    """Accumulated local effects of numeric covariates.

    The covariate range is cut at ``grid_size + 1`` quantiles. For the rows
    of each bin, the covariate is moved to the lower and to the upper bin
    edge and the mean prediction difference is the local effect of the bin.
    The effects are accumulated over the edges and shifted so that their
    average over the rows equals the average prediction.

    Returns
    -------
    ProfileResult
        ``kind="ale"``, one value per bin edge.
    """
    covariates = explainer._check_covariates(covariates)
    grid_size = _check_grid_size(grid_size)
    not_numeric = [c for c in covariates if not _is_numeric(explainer.data[c])]
    if not_numeric:
        raise InputError(f"ALE needs numeric covariates, got {not_numeric}")
    background = sample_rows(explainer.data, n_max, resolve_seed(seed))
    mean_prediction = explainer._predict(background).mean()

    rows = []
    for covariate in covariates:
        x = background[covariate].to_numpy(dtype=float)
        edges = np.unique(np.quantile(x, np.linspace(0, 1, grid_size + 1)))
        if len(edges) == 1:
            rows.append((covariate, edges[0], mean_prediction))
            continue

        # bin k covers (edges[k - 1], edges[k]], the first bin includes its lower edge
        n_bins = len(edges) - 1
        bins = np.clip(np.searchsorted(edges, x, side="left"), 1, n_bins)

        moved = pd.concat([background, background], ignore_index=True)
        moved[covariate] = np.concatenate([edges[bins - 1], edges[bins]])
        pred = explainer._predict(moved).reshape(2, len(x))
        local = pred[1] - pred[0]

        counts = np.bincount(bins, minlength=n_bins + 1)[1:]
        sums = np.bincount(bins, weights=local, minlength=n_bins + 1)[1:]
        effects = np.divide(sums, counts, out=np.zeros(n_bins), where=counts > 0)
        accumulated = np.concatenate([[0.0], np.cumsum(effects)])

        # value of each row: the accumulated effect at the midpoint of its bin
        midpoints = (accumulated[:-1] + accumulated[1:]) / 2
        shift = mean_prediction - np.average(midpoints, weights=counts)
        rows.extend(zip(itertools.repeat(covariate), edges, accumulated + shift))
        logger.debug("%s: ALE of %s over %d bins", explainer.label, covariate, n_bins)

    return ProfileResult(result=_profile_frame(rows), kind="ale", label=explainer.label)


def _joint_profiles(explainer, background, columns):
    """Partial dependence of ``columns`` and of all other columns.

    Entry (i, k) of the grid is the prediction for row k with ``columns``
    taken from row i. Averaging over k gives the partial dependence of
    ``columns`` at row i, averaging over i the partial dependence of the
    complement at row k.
    """
    n = len(background)
    stacked = _stack(background, n)
    source = background.iloc[np.repeat(np.arange(n), n)].reset_index(drop=True)
    for column in columns:
        stacked[column] = source[column]
    grid = explainer._predict(stacked).reshape(n, n)
    return grid.mean(axis=1), grid.mean(axis=0)


def _centered(values):
    return values - values.mean()


def _h_statistic(numerator, denominator, normalize):
    if not normalize:
        return float(np.mean(numerator))
    total = float(np.sum(denominator))
    return float(np.sum(numerator) / total) if total > 0 else 0.0


def interaction_strength(explainer, covariates=None, pairwise=False, normalize=True, n_max=200, seed=None):
    """Friedman's H statistic.

    Overall (``pairwise=False``): share of the prediction variance of
    covariate j not explained by the partial dependence of j plus the one of
    all other covariates. Pairwise: share of the joint partial dependence of
    (j, k) not explained by the two individual ones. With ``normalize=False``
    the unnormalized mean squared difference is returned instead, which
    compares better across covariates with weak main effects.

    The model is called on ``n_max ** 2`` rows per covariate and per pair.

    Returns
    -------
    InteractionResult
        ``result`` columns ``variable`` (or ``variable_1``, ``variable_2``)
        and ``h2``, sorted descending.
    """
    covariates = explainer._check_covariates(covariates)
    if pairwise and len(covariates) < 2:
        raise InputError("pairwise interaction strength needs at least two covariates")
    background = sample_rows(explainer.data, n_max, resolve_seed(seed))

    profiles = {c: _joint_profiles(explainer, background, [c]) for c in covariates}
    single = {c: _centered(own) for c, (own, _) in profiles.items()}

    if pairwise:
        rows = []
        for first, second in itertools.combinations(covariates, 2):
            joint = _centered(_joint_profiles(explainer, background, [first, second])[0])
            h2 = _h_statistic((joint - single[first] - single[second]) ** 2, joint**2, normalize)
            rows.append((first, second, h2))
        result = pd.DataFrame(rows, columns=["variable_1", "variable_2", "h2"])
        keys = ["variable_1", "variable_2"]
    else:
        f = _centered(explainer._predict(background))
        rows = []
        for covariate in covariates:
            rest = _centered(profiles[covariate][1])
            h2 = _h_statistic((f - single[covariate] - rest) ** 2, f**2, normalize)
            rows.append((covariate, h2))
        result = pd.DataFrame(rows, columns=["variable", "h2"])
        keys = ["variable"]

    result = (
        result.assign(_neg=-result["h2"])
        .sort_values(["_neg", *keys], kind="mergesort")
        .drop(columns="_neg")
        .reset_index(drop=True)
    )
    logger.info(
        "%s: interaction strength of %d covariates (pairwise=%s)",
        explainer.label,
        len(covariates),
        pairwise,
    )
    return InteractionResult(result=result, pairwise=pairwise, normalize=normalize, label=explainer.label)
