import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from claims_xai.evaluation import mean_squared_error
from claims_xai.explain import Explainer


@pytest.fixture
def explainers(numeric_data, linear_model):
    first = linear_model({"A": 2.0, "B": 1.0})
    second = linear_model({"A": 1.0, "C": 0.5})
    return [
        Explainer(m, numeric_data, first.predict(numeric_data), label=label)
        for m, label in [(first, "first"), (second, "second")]
    ]


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_importance(explainers):
    first, second = (e.importance(metric=mean_squared_error, n_repeats=2, seed=0) for e in explainers)
    assert isinstance(first.plot(second, max_vars=2), Figure)


@pytest.mark.parametrize("max_vars", [None, 1])
def test_plot_breakdown(explainers, numeric_data, max_vars):
    first, second = (e.shap(numeric_data.iloc[[0]], n_perm=2, seed=0, n_max=20) for e in explainers)
    fig = first.plot(second, max_vars=max_vars)
    assert isinstance(fig, Figure)
    assert len(fig.axes) == 2


def test_plot_profiles(explainers):
    first, second = (e.partial_dependence(grid_size=5, n_max=20, seed=0) for e in explainers)
    fig = first.plot(second, variables=["A", "C"])
    assert isinstance(fig, Figure)
    ale = explainers[0].ale(["A", "B"], n_max=50, seed=0)
    assert isinstance(ale.plot(), Figure)


def test_plot_categorical_profile(policies, linear_model):
    data = policies[["BonusMalus", "Region"]]
    exp = Explainer(linear_model({"BonusMalus": 0.01}), data)
    assert isinstance(exp.partial_dependence(n_max=50).plot(), Figure)


@pytest.mark.parametrize("pairwise", [False, True])
def test_plot_interaction(explainers, pairwise):
    first, second = (e.interaction_strength(pairwise=pairwise, n_max=15, seed=0) for e in explainers)
    assert isinstance(first.plot(second), Figure)
