import logging

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from ..evaluation import evaluate_predictions, poisson_deviance
from . import _breakdown, _effects, _importance, _surrogate
from ._errors import ComputationError, InputError
from ._sampling import DEFAULT_N_MAX

logger = logging.getLogger(__name__)


def _default_predict(model, X):
    return model.predict(X)


def _as_vector(values, n, name):
    if isinstance(values, (pd.Series, pd.DataFrame)):
        values = values.to_numpy()
    values = np.asarray(values, dtype=float).ravel()
    if len(values) != n:
        raise InputError(f"{name} has {len(values)} values, data has {n} rows")
    values.setflags(write=False)
    return values


def _cast_changes_value(before, after):
    """True if casting ``before`` to the dtype of ``after`` lost information."""
    if (after.isna() & before.notna()).any():
        return True
    if is_numeric_dtype(after) and not is_bool_dtype(after):
        original = pd.to_numeric(before, errors="coerce").to_numpy(dtype=float)
        stored = after.to_numpy(dtype=float, na_value=np.nan)
        return bool(np.any((original != stored) & ~(np.isnan(original) & np.isnan(stored))))
    return False


class Explainer:
    """Model-agnostic explainer of one fitted model on a reference dataset.

    Parameters
    ----------
    model : object
        Any fitted model. It is only ever used through ``predict_function``.
    data : pd.DataFrame
        Covariates of the reference (usually test) set, exactly the columns
        the model expects. A copy is kept, later changes to the frame do not
        reach the explainer.
    y : array-like, optional
        Observed response of ``data``. Needed for importance and performance.
    weights : array-like, optional
        Case weights (exposure). Must be finite and positive; defaults to 1.
    predict_function : callable, optional
        ``predict_function(model, X) -> array`` of predictions on the
        response scale. Defaults to ``model.predict(X)``.
    label : str, optional
        Name of the model in results and plots.

    Examples
    --------
    >>> exp_glm = Explainer(glm, X_test, y_test, weights=w_test, label="GLM")
    >>> exp_glm.importance(n_repeats=4, seed=1).result
    >>> exp_glm.breakdown(X_test.iloc[[0]], strategy="permutation_average", seed=1)
    """

    def __init__(self, model, data, y=None, weights=None, predict_function=None, label=None):
        if not isinstance(data, pd.DataFrame):
            raise InputError(f"data must be a pandas DataFrame, got {type(data).__name__}")
        if data.empty:
            raise InputError("data has no rows or no columns")
        if not data.columns.is_unique:
            raise InputError("data has duplicated column names")

        n = len(data)
        self.model = model
        self.data = data.copy()
        self.y = None if y is None else _as_vector(y, n, "y")
        if weights is None:
            weights = np.ones(n)
        self.weights = _as_vector(weights, n, "weights")
        if not np.all(np.isfinite(self.weights)) or np.any(self.weights <= 0):
            raise InputError("weights must be finite and strictly positive")
        self.predict_function = _default_predict if predict_function is None else predict_function
        self.label = type(model).__name__ if label is None else label

    def __repr__(self):
        return f"Explainer(label={self.label!r}, rows={len(self.data)}, columns={list(self.data.columns)})"

    @property
    def covariates(self):
        return list(self.data.columns)

    # ------------------------------------------------------------------
    # shared helpers
    # ------------------------------------------------------------------
    def _check_covariates(self, covariates, *frames):
        """Validate covariate names against the data (and further frames)."""
        if covariates is None:
            return self.covariates
        if isinstance(covariates, str):
            covariates = [covariates]
        covariates = list(covariates)
        if not covariates:
            raise InputError("at least one covariate is required")
        if len(set(covariates)) != len(covariates):
            raise InputError(f"duplicated covariates in {covariates}")
        for frame in (self.data, *frames):
            missing = [c for c in covariates if c not in frame.columns]
            if missing:
                raise InputError(f"unknown covariate(s): {missing}")
        return covariates

    def _predict(self, X):
        """Batched predictions as a finite float vector."""
        pred = np.asarray(self.predict_function(self.model, X), dtype=float).ravel()
        if len(pred) != len(X):
            raise ComputationError(
                f"predict_function returned {len(pred)} values for {len(X)} rows"
            )
        if not np.all(np.isfinite(pred)):
            raise ComputationError(f"{self.label}: model returned non-finite predictions")
        return pred

    def _as_row(self, instance):
        """One-row DataFrame with the columns and dtypes of the data."""
        if isinstance(instance, pd.Series):
            instance = pd.DataFrame([instance.to_dict()])
        elif isinstance(instance, dict):
            instance = pd.DataFrame([instance])
        elif not isinstance(instance, pd.DataFrame):
            raise InputError(f"instance must be a DataFrame, Series or dict, got {type(instance).__name__}")
        if len(instance) != 1:
            raise InputError(f"instance must be a single row, got {len(instance)}")
        missing = [c for c in self.data.columns if c not in instance.columns]
        if missing:
            raise InputError(f"instance lacks covariate(s): {missing}")
        row = instance[self.covariates].reset_index(drop=True)
        try:
            cast = row.astype(self.data.dtypes.to_dict())
        except (TypeError, ValueError) as e:
            raise InputError(f"instance does not match the data types: {e}") from e
        changed = [c for c in self.covariates if _cast_changes_value(row[c], cast[c])]
        if changed:
            raise InputError(
                f"instance value(s) of {changed} cannot be stored in the data types "
                f"{[str(self.data[c].dtype) for c in changed]}"
            )
        return cast

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def predict(self, X=None):
        """Predictions on ``X`` (default: the reference data)."""
        return self._predict(self.data if X is None else X)

    def performance(self):
        """Performance summary of the model on the reference data."""
        if self.y is None:
            raise InputError("performance needs the observed response y")
        return evaluate_predictions(self.y, self._predict(self.data), self.weights, label=self.label)

    def importance(self, covariates=None, metric=poisson_deviance, n_repeats=4, seed=None):
        """Permutation importance, see :func:`claims_xai.explain._importance.permutation_importance`."""
        return _importance.permutation_importance(
            self, covariates=covariates, metric=metric, n_repeats=n_repeats, seed=seed
        )

    def breakdown(
        self,
        instance,
        covariates=None,
        background=None,
        strategy="fixed_order",
        n_perm=16,
        seed=None,
        n_max=DEFAULT_N_MAX,
    ):
        """Additive attribution of one prediction (breakdown or approximate SHAP)."""
        return _breakdown.breakdown(
            self,
            instance,
            covariates=covariates,
            background=background,
            strategy=strategy,
            n_perm=n_perm,
            seed=seed,
            n_max=n_max,
        )

    def shap(self, instance, covariates=None, background=None, n_perm=16, seed=None, n_max=DEFAULT_N_MAX):
        """Shortcut for ``breakdown(..., strategy="permutation_average")``."""
        return self.breakdown(
            instance,
            covariates=covariates,
            background=background,
            strategy="permutation_average",
            n_perm=n_perm,
            seed=seed,
            n_max=n_max,
        )

    def partial_dependence(self, covariates=None, grid_size=_effects.DEFAULT_GRID_SIZE, n_max=DEFAULT_N_MAX, seed=None):
        return _effects.partial_dependence(self, covariates, grid_size=grid_size, n_max=n_max, seed=seed)

    def ale(self, covariates=None, grid_size=_effects.DEFAULT_GRID_SIZE, n_max=DEFAULT_N_MAX, seed=None):
        return _effects.accumulated_local_effects(self, covariates, grid_size=grid_size, n_max=n_max, seed=seed)

    def interaction_strength(self, covariates=None, pairwise=False, normalize=True, n_max=200, seed=None):
        return _effects.interaction_strength(
            self, covariates, pairwise=pairwise, normalize=normalize, n_max=n_max, seed=seed
        )

    def surrogate_tree(self, max_depth=3, **tree_params):
        return _surrogate.surrogate_tree(self, max_depth=max_depth, **tree_params)
