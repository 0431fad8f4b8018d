import numpy as np
import pytest

from claims_xai.data import FEATURES
from claims_xai.explain import Explainer
from claims_xai.modeling import CalibratedNetRegressor, glm_pipeline, lgbm_pipeline


def _fit(name, policies):
    X, y, w = policies[FEATURES], policies["Freq"], policies["Exposure"]
    if name == "glm":
        return glm_pipeline().fit(X, y, estimate__sample_weight=w)
    if name == "lgbm":
        return lgbm_pipeline(n_estimators=50, min_child_samples=20).fit(X, y, estimate__sample_weight=w)
    return CalibratedNetRegressor(hidden_layer_sizes=(8,), max_iter=50).fit(X, y, sample_weight=w)


@pytest.mark.filterwarnings("ignore::sklearn.exceptions.ConvergenceWarning")
@pytest.mark.parametrize("name", ["glm", "lgbm", "net"])
def test_models_predict_positive_frequencies(policies, name):
    model = _fit(name, policies)

    pred = model.predict(policies[FEATURES])

    assert pred.shape == (len(policies),)
    assert np.all(np.isfinite(pred))
    assert np.all(pred > 0)


@pytest.mark.filterwarnings("ignore::sklearn.exceptions.ConvergenceWarning")
@pytest.mark.parametrize("name", ["glm", "net"])
def test_glm_based_models_are_balanced(policies, name):
    model = _fit(name, policies)

    pred = model.predict(policies[FEATURES])

    observed = np.sum(policies["ClaimNb"])
    assert np.sum(pred * policies["Exposure"]) == pytest.approx(observed, rel=1e-2)


def test_glm_picks_up_bonus_malus(policies):
    model = _fit("glm", policies)
    exp = Explainer(model, policies[FEATURES], policies["Freq"], weights=policies["Exposure"], label="GLM")

    profile = exp.partial_dependence("BonusMalus", grid_size=5, seed=0).profile("BonusMalus")

    assert profile["value"].is_monotonic_increasing


@pytest.mark.filterwarnings("ignore::sklearn.exceptions.ConvergenceWarning")
def test_shap_of_fitted_model_is_additive(policies):
    model = _fit("lgbm", policies)
    X = policies[FEATURES]
    exp = Explainer(model, X, policies["Freq"], weights=policies["Exposure"], label="LGBM")
    instance = X.iloc[[10]]

    res = exp.shap(instance, n_perm=3, seed=0, n_max=50)

    assert res.baseline + res.result["contribution"].sum() == pytest.approx(model.predict(instance)[0], rel=1e-6)
    assert set(res.result["variable"]) == set(FEATURES)


def test_calibrated_net_requires_fit(policies):
    from sklearn.exceptions import NotFittedError

    with pytest.raises(NotFittedError):
        CalibratedNetRegressor().predict(policies[FEATURES])
