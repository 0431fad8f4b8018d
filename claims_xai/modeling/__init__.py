"""Modeling subpackage exports.

	from claims_xai.modeling import glm_pipeline, lgbm_pipeline, CalibratedNetRegressor
"""

from ._calibrated_net import CalibratedNetRegressor
from ._models import glm_pipeline, lgbm_pipeline

__all__ = ["CalibratedNetRegressor", "glm_pipeline", "lgbm_pipeline"]
