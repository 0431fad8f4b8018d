"""Result values returned by :class:`~claims_xai.explain.Explainer`.

Every result keeps its numbers in a ``result`` DataFrame and the model label,
so results of several models can be concatenated or plotted together:

    imp_glm.plot(imp_lgbm, imp_net)
"""

from dataclasses import dataclass

import pandas as pd

from .. import plotting


@dataclass(frozen=True)
class ImportanceResult:
    """Permutation importance.

    ``result`` has one row per covariate with columns ``variable``,
    ``importance`` (mean loss increase over the repeats) and ``std``, ordered
    by descending importance and then by name.
    """

    result: pd.DataFrame
    baseline_loss: float
    metric: str
    n_repeats: int
    label: str

    def to_dict(self):
        return dict(zip(self.result["variable"], self.result["importance"]))

    def plot(self, *others, ax=None, max_vars=None):
        return plotting.plot_importance([self, *others], ax=ax, max_vars=max_vars)


@dataclass(frozen=True)
class BreakdownResult:
    """Additive decomposition of one prediction.

    ``baseline + result["contribution"].sum() == prediction`` up to rounding.
    For ``permutation_average`` the ``std`` column holds the spread of the
    contributions over the random visiting orders.
    """

    result: pd.DataFrame
    baseline: float
    prediction: float
    strategy: str
    n_perm: int
    n_evaluations: int
    label: str

    @property
    def contributions(self):
        return dict(zip(self.result["variable"], self.result["contribution"]))

    def plot(self, *others, max_vars=None):
        return plotting.plot_breakdown([self, *others], max_vars=max_vars)


@dataclass(frozen=True)
class ProfileResult:
    """Partial dependence or accumulated local effects.

    ``result`` is long format: ``variable``, ``grid`` (the covariate value)
    and ``value`` (the profile on the prediction scale).
    """

    result: pd.DataFrame
    kind: str
    label: str

    def profile(self, variable):
        part = self.result[self.result["variable"] == variable]
        return part[["grid", "value"]].reset_index(drop=True)

    def plot(self, *others, variables=None):
        return plotting.plot_profiles([self, *others], variables=variables)


@dataclass(frozen=True)
class InteractionResult:
    """Friedman's H statistic per covariate (``pairwise=False``) or per pair."""

    result: pd.DataFrame
    pairwise: bool
    normalize: bool
    label: str

    def plot(self, *others, ax=None, max_vars=None):
        return plotting.plot_interaction([self, *others], ax=ax, max_vars=max_vars)


@dataclass(frozen=True)
class SurrogateResult:
    """Shallow tree fitted to the model predictions."""

    model: object
    r2: float
    rules: str
    label: str

    def predict(self, X):
        return self.model.predict(X)
