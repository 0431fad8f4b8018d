"""Data subpackage exports.

	from claims_xai.data import create_sample_split, load_transform
"""

from ._load_transform import (
    CATEGORICALS,
    FEATURES,
    NUMERICS,
    RESPONSE,
    WEIGHT,
    load_transform,
    transform,
)
from ._sample_split import create_sample_split

__all__ = [
    "CATEGORICALS",
    "FEATURES",
    "NUMERICS",
    "RESPONSE",
    "WEIGHT",
    "create_sample_split",
    "load_transform",
    "transform",
]
