"""Explanation subpackage exports.

	from claims_xai.explain import Explainer

	exp = Explainer(model, X_test, y_test, weights=w_test, label="GLM")
	exp.importance(seed=1).plot()
	exp.breakdown(X_test.iloc[[0]], strategy="permutation_average", seed=1)
"""

from ._errors import ComputationError, ExplainerError, InputError
from ._explainer import Explainer
from ._results import (
    BreakdownResult,
    ImportanceResult,
    InteractionResult,
    ProfileResult,
    SurrogateResult,
)

__all__ = [
    "BreakdownResult",
    "ComputationError",
    "Explainer",
    "ExplainerError",
    "ImportanceResult",
    "InputError",
    "InteractionResult",
    "ProfileResult",
    "SurrogateResult",
]
