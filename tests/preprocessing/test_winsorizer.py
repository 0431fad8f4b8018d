import numpy as np
import pandas as pd
import pytest
from sklearn.exceptions import NotFittedError

from claims_xai.preprocessing import Winsorizer


@pytest.mark.parametrize(
    "lower_quantile, upper_quantile", [(0, 1), (0.05, 0.95), (0.5, 0.5)]
)
def test_winsorizer(lower_quantile, upper_quantile):
    rng = np.random.default_rng(0)
    X = rng.normal(0, 1, (1000, 2))

    w = Winsorizer(lower_quantile=lower_quantile, upper_quantile=upper_quantile)
    X_trans = w.fit(X).transform(X)

    assert X_trans.shape == X.shape

    expected_lower = np.quantile(X, lower_quantile, axis=0)
    expected_upper = np.quantile(X, upper_quantile, axis=0)
    assert np.allclose(w.lower_quantile_, expected_lower)
    assert np.allclose(w.upper_quantile_, expected_upper)

    assert np.all(X_trans >= w.lower_quantile_)
    assert np.all(X_trans <= w.upper_quantile_)

    if lower_quantile == 0 and upper_quantile == 1:
        assert np.allclose(X_trans, X)

    if lower_quantile == 0.5 and upper_quantile == 0.5:
        assert np.allclose(X_trans, np.median(X, axis=0))


def test_winsorizer_clips_columns_independently():
    X = pd.DataFrame({"small": np.arange(100.0), "large": np.arange(100.0) * 1000})
    w = Winsorizer(0.1, 0.9).fit(X)
    X_trans = w.transform(X)

    assert X_trans[:, 0].max() == pytest.approx(np.quantile(X["small"], 0.9))
    assert X_trans[:, 1].max() == pytest.approx(np.quantile(X["large"], 0.9))
    assert list(w.get_feature_names_out()) == ["small", "large"]


@pytest.mark.parametrize("lower_quantile, upper_quantile", [(0.9, 0.1), (-0.1, 0.5), (0.5, 1.5)])
def test_winsorizer_rejects_bad_quantiles(lower_quantile, upper_quantile):
    with pytest.raises(ValueError):
        Winsorizer(lower_quantile, upper_quantile).fit(np.ones((10, 1)))


def test_winsorizer_requires_fit():
    with pytest.raises(NotFittedError):
        Winsorizer().transform(np.ones((10, 1)))
