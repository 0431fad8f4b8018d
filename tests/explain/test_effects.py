import numpy as np
import pandas as pd
import pytest

from claims_xai.explain import Explainer, InputError


class InteractionModel:
    def predict(self, X):
        return (4 * X["A"] * X["B"] + 0.1 * X["C"]).to_numpy(dtype=float)


class StepModel:
    def predict(self, X):
        return np.where(X["A"] > 0.5, 3.0, 1.0)


def test_partial_dependence_of_additive_model_is_linear(numeric_data, linear_model):
    model = linear_model({"A": 2.0, "B": 1.0})
    exp = Explainer(model, numeric_data)

    res = exp.partial_dependence(["A", "C"], grid_size=10, seed=0)

    profile_a = res.profile("A")
    assert len(profile_a) == 10
    slope, intercept = np.polyfit(profile_a["grid"].astype(float), profile_a["value"], 1)
    assert slope == pytest.approx(2.0)
    assert intercept == pytest.approx(numeric_data["B"].mean())

    # C has only five values, all of them are used; the model ignores C
    profile_c = res.profile("C")
    assert profile_c["grid"].tolist() == [0, 1, 2, 3, 4]
    assert np.allclose(profile_c["value"], model.predict(numeric_data).mean())
    assert res.kind == "partial_dependence"


def test_partial_dependence_of_categorical(policies, linear_model):
    data = policies[["BonusMalus", "Region"]]
    model = linear_model({"BonusMalus": 0.01})
    exp = Explainer(model, data)

    profile = exp.partial_dependence("Region").profile("Region")

    assert profile["grid"].tolist() == sorted(policies["Region"].cat.categories)
    assert np.allclose(profile["value"], profile["value"].iloc[0])


def test_ale_slope_of_linear_model(numeric_data, linear_model):
    model = linear_model({"A": 3.0, "B": 1.0})
    exp = Explainer(model, numeric_data)

    res = exp.ale(["A", "B"], grid_size=8, n_max=None)

    for variable, coef in [("A", 3.0), ("B", 1.0)]:
        profile = res.profile(variable)
        assert len(profile) == 9
        slopes = np.diff(profile["value"]) / np.diff(profile["grid"])
        assert np.allclose(slopes, coef)
    assert res.kind == "ale"


def test_ale_of_constant_covariate(numeric_data, linear_model):
    data = numeric_data.assign(D=2.0)
    model = linear_model({"A": 1.0})
    exp = Explainer(model, data)

    profile = exp.ale("D", n_max=None).profile("D")

    assert len(profile) == 1
    assert profile["value"].iloc[0] == pytest.approx(model.predict(data).mean())


def test_ale_needs_numeric_covariate(policies, linear_model):
    data = policies[["BonusMalus", "VehGas"]]
    exp = Explainer(linear_model({"BonusMalus": 1.0}), data)
    with pytest.raises(InputError):
        exp.ale(["VehGas"])


def test_h_statistic_of_additive_model_is_zero(numeric_data, linear_model):
    model = linear_model({"A": 2.0, "B": 1.0, "C": -0.5})
    exp = Explainer(model, numeric_data)

    overall = exp.interaction_strength(n_max=40, seed=0)
    pairwise = exp.interaction_strength(pairwise=True, n_max=40, seed=0)

    assert np.allclose(overall.result["h2"], 0, atol=1e-10)
    assert np.allclose(pairwise.result["h2"], 0, atol=1e-10)


def test_h_statistic_detects_interaction(numeric_data):
    exp = Explainer(InteractionModel(), numeric_data)

    overall = exp.interaction_strength(n_max=40, seed=0)
    pairwise = exp.interaction_strength(pairwise=True, n_max=40, seed=0)

    h2 = dict(zip(overall.result["variable"], overall.result["h2"]))
    assert h2["A"] > 0.05
    assert h2["B"] > 0.05
    assert h2["C"] == pytest.approx(0, abs=1e-10)
    assert overall.result["h2"].is_monotonic_decreasing

    top = pairwise.result.iloc[0]
    assert {top["variable_1"], top["variable_2"]} == {"A", "B"}
    assert top["h2"] > 0.05


def test_h_statistic_unnormalized(numeric_data):
    exp = Explainer(InteractionModel(), numeric_data)

    res = exp.interaction_strength(["A", "B"], normalize=False, n_max=30, seed=1)

    assert not res.normalize
    assert (res.result["h2"] > 0).all()


def test_pairwise_needs_two_covariates(numeric_data):
    exp = Explainer(InteractionModel(), numeric_data)
    with pytest.raises(InputError):
        exp.interaction_strength(["A"], pairwise=True)


def test_surrogate_tree_recovers_step(numeric_data):
    exp = Explainer(StepModel(), numeric_data)

    res = exp.surrogate_tree(max_depth=1)

    assert res.r2 == pytest.approx(1.0)
    assert "A <=" in res.rules
    assert np.allclose(res.predict(numeric_data), StepModel().predict(numeric_data))


def test_surrogate_tree_with_categoricals(policies, linear_model):
    data = policies[["BonusMalus", "VehGas", "Region"]]
    model = linear_model({"BonusMalus": 0.01})
    exp = Explainer(model, data, weights=policies["Exposure"])

    res = exp.surrogate_tree(max_depth=3)

    assert 0.5 < res.r2 <= 1.0
    assert "BonusMalus" in res.rules


def test_profiles_do_not_mutate_data(numeric_data):
    before = numeric_data.copy()
    exp = Explainer(InteractionModel(), numeric_data)

    exp.partial_dependence(seed=0)
    exp.ale(seed=0)
    exp.interaction_strength(n_max=20, seed=0)

    pd.testing.assert_frame_equal(numeric_data, before)


@pytest.mark.parametrize("grid_size", [0, -3, 2.5, True])
def test_profiles_reject_bad_grid_size(numeric_data, linear_model, grid_size):
    exp = Explainer(linear_model({"A": 1.0}), numeric_data)
    with pytest.raises(InputError):
        exp.partial_dependence(["A"], grid_size=grid_size)
    with pytest.raises(InputError):
        exp.ale(["A"], grid_size=grid_size)


def test_unnormalized_h_statistic_is_mean_of_numerator(numeric_data):
    data = numeric_data.iloc[:40]
    model = InteractionModel()
    exp = Explainer(model, data)

    normalized = exp.interaction_strength(["A", "B"], n_max=None).result.set_index("variable")["h2"]
    absolute = exp.interaction_strength(["A", "B"], normalize=False, n_max=None).result.set_index("variable")["h2"]

    # normalized = sum(num) / sum(f^2), absolute = mean(num)
    f = model.predict(data)
    mean_f2 = np.mean((f - f.mean()) ** 2)
    for variable in ["A", "B"]:
        assert absolute[variable] == pytest.approx(normalized[variable] * mean_f2)
