import logging

import numpy as np
from glum import GeneralizedLinearRegressor
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.compose import ColumnTransformer
from sklearn.neural_network import MLPRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler
from sklearn.utils.validation import check_is_fitted

from ..preprocessing import Winsorizer

logger = logging.getLogger(__name__)


class CalibratedNetRegressor(RegressorMixin, BaseEstimator):
    """Feed-forward network whose output is recalibrated by a Poisson GLM.

    Categorical covariates enter one-hot encoded, so the first hidden layer
    acts as an embedding of each level. The network is trained on squared
    error without exposure weights; a Poisson GLM with log link is then
    fitted on the network output with exposure weights. The GLM maps the
    output to positive frequencies and, through its intercept, restores the
    balance property: weighted predictions sum to the observed claims on
    the training data.
    """

    def __init__(
        self,
        categoricals=None,
        hidden_layer_sizes=(20, 15),
        alpha=1e-4,
        learning_rate_init=1e-3,
        max_iter=200,
        early_stopping=True,
        response_quantile=0.99,
        random_state=0,
    ):
        self.categoricals = categoricals
        self.hidden_layer_sizes = hidden_layer_sizes
        self.alpha = alpha
        self.learning_rate_init = learning_rate_init
        self.max_iter = max_iter
        self.early_stopping = early_stopping
        self.response_quantile = response_quantile
        self.random_state = random_state

    def _network_input(self, X):
        if self.categoricals is not None:
            categoricals = list(self.categoricals)
        else:
            categoricals = X.select_dtypes(exclude="number").columns.tolist()
        numerics = [c for c in X.columns if c not in categoricals]
        return ColumnTransformer(
            transformers=[
                ("num", Pipeline([("clip", Winsorizer()), ("scale", StandardScaler())]), numerics),
                ("cat", OneHotEncoder(handle_unknown="ignore", sparse_output=False), categoricals),
            ]
        )

    def fit(self, X, y, sample_weight=None):
        y = np.asarray(y, dtype=float)
        sample_weight = np.ones_like(y) if sample_weight is None else np.asarray(sample_weight, dtype=float)

        # single short exposures give huge frequencies; clip them for the
        # squared-error fit only, the GLM below sees the raw response
        self.response_clip_ = Winsorizer(0, self.response_quantile).fit(y.reshape(-1, 1))
        y_clipped = self.response_clip_.transform(y.reshape(-1, 1)).ravel()

        self.network_ = Pipeline(
            steps=[
                ("preprocess", self._network_input(X)),
                (
                    "net",
                    MLPRegressor(
                        hidden_layer_sizes=self.hidden_layer_sizes,
                        alpha=self.alpha,
                        learning_rate_init=self.learning_rate_init,
                        max_iter=self.max_iter,
                        early_stopping=self.early_stopping,
                        random_state=self.random_state,
                    ),
                ),
            ]
        )
        self.network_.fit(X, y_clipped)
        logger.info(
            "Network fitted in %d iterations", self.network_.named_steps["net"].n_iter_
        )

        self.calibrator_ = GeneralizedLinearRegressor(family="poisson", alpha=0, fit_intercept=True)
        self.calibrator_.fit(self._score(X), y, sample_weight=sample_weight)
        logger.info(
            "Calibration GLM: intercept=%.4f, slope=%.4f",
            self.calibrator_.intercept_,
            self.calibrator_.coef_[0],
        )
        return self

    def _score(self, X):
        return self.network_.predict(X).reshape(-1, 1)

    def predict(self, X):
        check_is_fitted(self, ["network_", "calibrator_"])
        return self.calibrator_.predict(self._score(X))
