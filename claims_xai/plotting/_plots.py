"""Matplotlib renderings of explainer results.

Each function takes a list of results of the same kind, one per model, so
that models can be compared in one figure, and returns the figure.
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def _top_variables(tables, column, max_vars):
    """Union of variables ordered by their best score over the tables."""
    best = {}
    for table in tables:
        for variable, value in zip(table["variable"], table[column]):
            best[variable] = max(best.get(variable, -np.inf), value)
    ordered = sorted(best, key=lambda v: (-best[v], v))
    return ordered if max_vars is None else ordered[:max_vars]


def plot_importance(results, ax=None, max_vars=None):
    """Horizontal bars of mean loss increase with +/- one std error bars."""
    variables = _top_variables([res.result for res in results], "importance", max_vars)
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 0.4 * len(variables) * len(results) + 1.5))

    height = 0.8 / len(results)
    positions = np.arange(len(variables))
    for i, res in enumerate(results):
        table = res.result.set_index("variable").reindex(variables)
        ax.barh(
            positions + i * height,
            table["importance"],
            height=height,
            xerr=table["std"],
            label=res.label,
        )
    ax.set_yticks(positions + height * (len(results) - 1) / 2)
    ax.set_yticklabels(variables)
    ax.invert_yaxis()
    ax.axvline(0, color="black", linewidth=0.8)
    ax.set(
        title="Permutation importance",
        xlabel=f"Increase in {results[0].metric}",
    )
    ax.legend(loc="lower right")
    return ax.figure


def plot_breakdown(results, max_vars=None):
    """Waterfall chart from the baseline to the prediction, one panel per model."""
    fig, axes = plt.subplots(
        1, len(results), figsize=(7 * len(results), 6), squeeze=False, sharey=False
    )
    for ax, res in zip(axes[0], results):
        table = res.result
        if max_vars is not None and len(table) > max_vars:
            # remaining covariates are summed into one bar
            rest = table.iloc[max_vars:]["contribution"].sum()
            labels = [f"{v} = {x}" for v, x in zip(table["variable"][:max_vars], table["variable_value"][:max_vars])]
            labels.append("+ all other factors")
            contributions = np.append(table["contribution"].to_numpy()[:max_vars], rest)
        else:
            labels = [f"{v} = {x}" for v, x in zip(table["variable"], table["variable_value"])]
            contributions = table["contribution"].to_numpy()

        starts = res.baseline + np.concatenate([[0.0], np.cumsum(contributions)[:-1]])
        colors = np.where(contributions >= 0, "tab:red", "tab:green")
        positions = np.arange(len(labels))
        ax.barh(positions, contributions, left=starts, color=colors)
        ax.axvline(res.baseline, color="gray", linestyle="--", label=f"baseline {res.baseline:.4g}")
        ax.axvline(res.prediction, color="black", label=f"prediction {res.prediction:.4g}")
        ax.set_yticks(positions)
        ax.set_yticklabels(labels)
        ax.invert_yaxis()
        ax.set(title=f"{res.label}: {res.strategy.replace('_', ' ')}", xlabel="Prediction")
        ax.legend(loc="lower right")
    fig.tight_layout()
    return fig


def plot_profiles(results, variables=None):
    """One panel per covariate with a line (or markers for levels) per model."""
    if variables is None:
        variables = list(dict.fromkeys(v for res in results for v in res.result["variable"]))
    n_cols = min(3, len(variables))
    n_rows = int(np.ceil(len(variables) / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(5 * n_cols, 3.5 * n_rows), squeeze=False)

    for ax, variable in zip(axes.ravel(), variables):
        for res in results:
            profile = res.profile(variable)
            if profile.empty:
                continue
            numeric_grid = pd.to_numeric(profile["grid"], errors="coerce")
            if numeric_grid.notna().all():
                ax.plot(numeric_grid, profile["value"], marker=".", label=res.label)
            else:
                ax.plot(profile["grid"].astype(str), profile["value"], marker="o", linestyle="", label=res.label)
                ax.tick_params(axis="x", labelrotation=90)
        ax.set(title=variable)
    for ax in axes.ravel()[len(variables):]:
        ax.set_visible(False)

    kind = results[0].kind.replace("_", " ")
    axes[0, 0].legend()
    fig.suptitle(kind.upper() if kind == "ale" else kind.capitalize())
    fig.tight_layout()
    return fig


def plot_interaction(results, ax=None, max_vars=None):
    """Horizontal bars of the H statistic."""
    tables = [res.result for res in results]
    if results[0].pairwise:
        tables = [t.assign(variable=t["variable_1"] + ":" + t["variable_2"]) for t in tables]
    variables = _top_variables(tables, "h2", max_vars)
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 0.4 * len(variables) * len(results) + 1.5))

    height = 0.8 / len(results)
    positions = np.arange(len(variables))
    for i, (res, table) in enumerate(zip(results, tables)):
        table = table.set_index("variable").reindex(variables)
        ax.barh(positions + i * height, table["h2"], height=height, label=res.label)
    ax.set_yticks(positions + height * (len(results) - 1) / 2)
    ax.set_yticklabels(variables)
    ax.invert_yaxis()
    ax.set(
        title="Pairwise interaction strength" if results[0].pairwise else "Overall interaction strength",
        xlabel="Friedman's H²" if results[0].normalize else "Unnormalized H²",
    )
    ax.legend(loc="lower right")
    return ax.figure
