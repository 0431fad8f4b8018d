import numpy as np
from sklearn.base import BaseEstimator, OneToOneFeatureMixin, TransformerMixin
from sklearn.utils.validation import check_is_fitted, validate_data


class Winsorizer(OneToOneFeatureMixin, TransformerMixin, BaseEstimator):
    """Clip every column to its own [lower, upper] quantile range.

    Used in front of the network, which is sensitive to the long right tails
    of BonusMalus and the vehicle/driver ages.
    """

    def __init__(self, lower_quantile=0.01, upper_quantile=0.99):
        self.lower_quantile = lower_quantile
        self.upper_quantile = upper_quantile

    def fit(self, X, y=None):
        if not 0 <= self.lower_quantile <= self.upper_quantile <= 1:
            raise ValueError(
                "Expected 0 <= lower_quantile <= upper_quantile <= 1, got "
                f"{self.lower_quantile} and {self.upper_quantile}"
            )
        X = validate_data(self, X, dtype="numeric", ensure_2d=True, reset=True)

        self.lower_quantile_ = np.quantile(X, self.lower_quantile, axis=0)
        self.upper_quantile_ = np.quantile(X, self.upper_quantile, axis=0)

        return self

    def transform(self, X):
        check_is_fitted(self, ["lower_quantile_", "upper_quantile_"])

        X = validate_data(self, X, dtype="numeric", ensure_2d=True, reset=False)

        return np.clip(X, self.lower_quantile_, self.upper_quantile_)
