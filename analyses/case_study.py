# %%
import logging

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from claims_xai.data import FEATURES, NUMERICS, RESPONSE, WEIGHT, create_sample_split, load_transform
from claims_xai.explain import Explainer
from claims_xai.modeling import CalibratedNetRegressor, glm_pipeline, lgbm_pipeline

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# %%
# load data
df = load_transform()
df = create_sample_split(df, id_column="IDpol", training_frac=0.8)
df_train = df[df["sample"] == "train"].reset_index(drop=True)
df_test = df[df["sample"] == "test"].reset_index(drop=True)

X_train, y_train, w_train = df_train[FEATURES], df_train[RESPONSE], df_train[WEIGHT]
X_test, y_test, w_test = df_test[FEATURES], df_test[RESPONSE], df_test[WEIGHT]

print(f"train: {len(df_train):,} policies, test: {len(df_test):,} policies")
print(
    "portfolio frequency, train = {:.4f}, test = {:.4f}".format(
        np.average(y_train, weights=w_train), np.average(y_test, weights=w_test)
    )
)

# %%
# Three competing models. The Poisson GLM is the actuarial benchmark, the
# boosted trees and the network can pick up non-linear effects and
# interactions. The network is wrapped in a GLM so its output is positive and
# balanced on the training portfolio.
glm = glm_pipeline().fit(X_train, y_train, estimate__sample_weight=w_train)
lgbm = lgbm_pipeline().fit(X_train, y_train, estimate__sample_weight=w_train)
net = CalibratedNetRegressor().fit(X_train, y_train, sample_weight=w_train)

models = {"GLM": glm, "LGBM": lgbm, "NN": net}

# %%
# One explainer per model, all on the test set
explainers = {
    label: Explainer(model, X_test, y_test, weights=w_test, label=label)
    for label, model in models.items()
}

performance = pd.concat([exp.performance() for exp in explainers.values()], axis=1)
print(performance)

# %%
# Lorenz curves. Policies are ordered from the safest to the riskiest
# predicted frequency.
fig, ax = plt.subplots(figsize=(8, 8))
for label, exp in explainers.items():
    ranking = np.argsort(exp.predict())
    ranked_w = w_test.to_numpy()[ranking]
    cum_claims = np.cumsum(y_test.to_numpy()[ranking] * ranked_w)
    cum_claims /= cum_claims[-1]
    cum_exposure = np.cumsum(ranked_w) / ranked_w.sum()
    gini = performance.loc["gini", label]
    ax.plot(cum_exposure, cum_claims, label=f"{label} (Gini index: {gini: .3f})")
ax.plot([0, 1], [0, 1], linestyle="--", color="black", label="Random baseline")
ax.set(
    title="Lorenz Curves",
    xlabel="Fraction of exposure\n(ordered by model from safest to riskiest)",
    ylabel="Fraction of total claims",
)
ax.legend(loc="upper left")
plt.show()

# %%
# Permutation importance: increase of the Poisson deviance when a covariate is
# shuffled. Same seed for all models so they see the same permutations.
importance = {label: exp.importance(n_repeats=4, seed=1) for label, exp in explainers.items()}
importance["GLM"].plot(importance["LGBM"], importance["NN"])
plt.show()

print(pd.concat({label: imp.result.set_index("variable")["importance"] for label, imp in importance.items()}, axis=1))

# %%
# Main effects: partial dependence for all covariates, ALE for the numeric
# ones. ALE is less affected by the correlation of Area and LogDensity.
pdp = {label: exp.partial_dependence(n_max=1000, seed=1) for label, exp in explainers.items()}
pdp["GLM"].plot(pdp["LGBM"], pdp["NN"])
plt.show()

ale = {label: exp.ale(NUMERICS, n_max=1000, seed=1) for label, exp in explainers.items()}
ale["GLM"].plot(ale["LGBM"], ale["NN"])
plt.show()

# %%
# Interaction strength. The GLM has none on the link scale; on the response
# scale its exp link still creates some.
interaction = {
    label: exp.interaction_strength(n_max=200, seed=1) for label, exp in explainers.items()
}
interaction["GLM"].plot(interaction["LGBM"], interaction["NN"])
plt.show()

pairwise = explainers["LGBM"].interaction_strength(
    ["DrivAge", "BonusMalus", "VehAge", "LogDensity"], pairwise=True, n_max=200, seed=1
)
print(pairwise.result)

# %%
# Global surrogate trees: how much of each model can a depth 3 tree mimic?
for label, exp in explainers.items():
    surrogate = exp.surrogate_tree(max_depth=3)
    print(f"{label}: surrogate R2 = {surrogate.r2:.3f}")
    print(surrogate.rules)

# %%
# Local explanations of the riskiest policy according to the boosted trees
obs_index = int(np.argmax(explainers["LGBM"].predict()))
observation = X_test.iloc[[obs_index]]
print(observation.T)

breakdown = {
    label: exp.breakdown(observation, strategy="fixed_order", n_max=500, seed=1)
    for label, exp in explainers.items()
}
breakdown["GLM"].plot(breakdown["LGBM"], breakdown["NN"])
plt.show()

shap = {label: exp.shap(observation, n_perm=25, n_max=500, seed=1) for label, exp in explainers.items()}
shap["GLM"].plot(shap["LGBM"], shap["NN"], max_vars=8)
plt.show()

for label, res in shap.items():
    print(f"\n{label}: baseline = {res.baseline:.4f}, prediction = {res.prediction:.4f}")
    for _, row in res.result.head(5).iterrows():
        print(f"  {row['variable']} = {row['variable_value']}: {row['contribution']:+.4f}")

# %%
# Cross-check the approximate SHAP values of the GLM with dalex.
# Installation (if needed): pip install dalex
import dalex as dx

exp_dx = dx.Explainer(glm, data=X_test, y=y_test, label="GLM", verbose=False)
shap_dx = exp_dx.predict_parts(observation, type="shap", B=25, random_state=1)
dalex_mean = shap_dx.result[shap_dx.result["B"] == 0].set_index("variable_name")["contribution"]

comparison = pd.DataFrame(
    {
        "claims_xai": shap["GLM"].result.set_index("variable")["contribution"],
        "dalex": dalex_mean,
    }
)
print(comparison)

# %%
