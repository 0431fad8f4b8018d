"""Builders for the benchmark GLM and the boosted trees.

Both are returned as unfitted sklearn Pipelines with a final step called
``estimate``, so the exposure is passed as ``estimate__sample_weight``:

    glm = glm_pipeline().fit(X_train, y_train, estimate__sample_weight=w_train)
"""

import logging

from dask_ml.preprocessing import Categorizer
from glum import GeneralizedLinearRegressor
from lightgbm import LGBMRegressor
from sklearn.pipeline import Pipeline

from ..data import CATEGORICALS

logger = logging.getLogger(__name__)


def glm_pipeline(categoricals=None, alpha=0.0):
    """Poisson GLM with log link.

    The Categorizer fixes the category levels seen in training so that the
    test set (or a single row to be explained) is dummy coded identically.
    """
    categoricals = list(CATEGORICALS if categoricals is None else categoricals)
    logger.debug("Building Poisson GLM pipeline, categoricals=%s", categoricals)
    return Pipeline(
        steps=[
            ("categorize", Categorizer(columns=categoricals)),
            (
                "estimate",
                GeneralizedLinearRegressor(
                    family="poisson",
                    alpha=alpha,
                    drop_first=True,
                    fit_intercept=True,
                ),
            ),
        ]
    )


def lgbm_pipeline(**params):
    """Gradient boosted trees with a Poisson objective.

    Pandas categoricals are split on natively by LightGBM. Keyword arguments
    override the default hyperparameters.
    """
    defaults = dict(
        objective="poisson",
        learning_rate=0.05,
        n_estimators=300,
        num_leaves=31,
        min_child_samples=50,
        subsample=0.8,
        subsample_freq=1,
        colsample_bytree=0.8,
        random_state=0,
        verbose=-1,
    )
    defaults.update(params)
    logger.debug("Building LightGBM pipeline with %s", defaults)
    return Pipeline(steps=[("estimate", LGBMRegressor(**defaults))])
