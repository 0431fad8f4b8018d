import logging

from sklearn.compose import ColumnTransformer
from sklearn.metrics import r2_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder
from sklearn.tree import DecisionTreeRegressor, export_text

from ._results import SurrogateResult

logger = logging.getLogger(__name__)


def surrogate_tree(explainer, max_depth=3, **tree_params):
    """Fit a shallow regression tree to the model predictions.

    The tree is fitted on the explainer data with the exposure as sample
    weight; categorical covariates are one-hot encoded. ``r2`` measures how
    much of the (weighted) variation of the predictions the tree reproduces.
    """
    data = explainer.data
    prediction = explainer._predict(data)
    categoricals = data.select_dtypes(exclude="number").columns.tolist()

    surrogate = Pipeline(
        steps=[
            (
                "preprocess",
                ColumnTransformer(
                    transformers=[
                        ("cat", OneHotEncoder(handle_unknown="ignore", sparse_output=False), categoricals)
                    ],
                    remainder="passthrough",
                    verbose_feature_names_out=False,
                ),
            ),
            ("tree", DecisionTreeRegressor(max_depth=max_depth, random_state=0, **tree_params)),
        ]
    )
    surrogate.fit(data, prediction, tree__sample_weight=explainer.weights)

    r2 = r2_score(prediction, surrogate.predict(data), sample_weight=explainer.weights)
    feature_names = [str(name) for name in surrogate[:-1].get_feature_names_out()]
    rules = export_text(surrogate[-1], feature_names=feature_names)
    logger.info("%s: surrogate tree of depth %d, R2 = %.3f", explainer.label, max_depth, r2)

    return SurrogateResult(model=surrogate, r2=float(r2), rules=rules, label=explainer.label)
