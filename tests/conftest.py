import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from claims_xai.data import CATEGORICALS, FEATURES


class LinearModel:
    """f(x) = intercept + sum(coef * x) on numeric columns."""

    def __init__(self, coef, intercept=0.0):
        self.coef = coef
        self.intercept = intercept

    def predict(self, X):
        pred = np.full(len(X), self.intercept, dtype=float)
        for column, coef in self.coef.items():
            pred += coef * X[column].to_numpy(dtype=float)
        return pred


@pytest.fixture
def toy_data():
    """Three rows: A varies, B is constant."""
    return pd.DataFrame({"A": [1, 2, 3], "B": [10, 10, 10]})


@pytest.fixture
def sum_model():
    return LinearModel({"A": 1.0, "B": 1.0})


@pytest.fixture
def numeric_data():
    rng = np.random.default_rng(0)
    n = 200
    return pd.DataFrame(
        {
            "A": rng.uniform(0, 1, n),
            "B": rng.normal(0, 1, n),
            "C": rng.integers(0, 5, n),
        }
    )


@pytest.fixture
def policies():
    """Synthetic portfolio with the covariates of freMTPL2freq."""
    rng = np.random.default_rng(42)
    n = 600
    df = pd.DataFrame(
        {
            "Area": rng.integers(1, 7, n),
            "VehPower": rng.integers(4, 10, n),
            "VehAge": rng.integers(0, 21, n),
            "DrivAge": rng.integers(18, 91, n),
            "BonusMalus": rng.integers(50, 151, n),
            "LogDensity": rng.normal(6, 2, n),
            "VehBrand": pd.Categorical(rng.choice(["B1", "B2", "B12"], n)),
            "VehGas": pd.Categorical(rng.choice(["Diesel", "Regular"], n)),
            "Region": pd.Categorical(rng.choice(["R11", "R24", "R82", "R93"], n)),
        }
    )
    exposure = rng.uniform(0.1, 1.0, n)
    rate = np.exp(-2.5 + 0.02 * (df["BonusMalus"] - 50) - 0.01 * (df["DrivAge"] - 18))
    claims = rng.poisson(rate * exposure)
    df["Exposure"] = exposure
    df["ClaimNb"] = claims
    df["Freq"] = claims / exposure
    assert set(FEATURES) <= set(df.columns)
    assert all(str(df[c].dtype) == "category" for c in CATEGORICALS)
    return df


@pytest.fixture
def linear_model():
    return LinearModel
