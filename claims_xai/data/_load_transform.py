"""Loader/transform for the freMTPL2freq claims-frequency dataset.

Design notes:
- The loader tries multiple sources in order: local file > HF resolve URL
    > huggingface_hub helper > OpenML. Local CSVs make it work offline, the
    remote routes make it work in fresh environments.
- Only the frequency table is needed: the response is the number of claims
    per year at risk (ClaimNb / Exposure) and Exposure is the case weight.
"""

import logging
import os

import numpy as np
import pandas as pd

try:
    # Optional: huggingface_hub provides hf_hub_download for dataset caching
    from huggingface_hub import hf_hub_download
    _HAS_HF = True
except ImportError:
    hf_hub_download = None
    _HAS_HF = False

logger = logging.getLogger(__name__)

HF_REPO_ID = "mabilton/fremtpl2"
HF_FREQ_URL = f"https://huggingface.co/datasets/{HF_REPO_ID}/resolve/main/freMTPL2freq.csv"
OPENML_FREQ_URL = "https://www.openml.org/data/get_csv/20649148/freMTPL2freq.arff"

# Covariates used by all three models of the case study.
CATEGORICALS = ["VehBrand", "VehGas", "Region"]
NUMERICS = ["Area", "VehPower", "VehAge", "DrivAge", "BonusMalus", "LogDensity"]
FEATURES = NUMERICS + CATEGORICALS

RESPONSE = "Freq"
WEIGHT = "Exposure"

# Upper caps for implausible or very sparse values.
_CAPS = {
    "ClaimNb": 4,
    "Exposure": 1,
    "VehPower": 9,
    "VehAge": 20,
    "DrivAge": 90,
    "BonusMalus": 150,
}


def _read_local_or_remote(freq_local):
    """
    Load the frequency CSV from the first source that works.

    Returns a pair (df, source), where 'source' is a short label of the route
    that succeeded: 'local', 'hf_url', 'hf_hub' or 'openml'.
    """
    if os.path.exists(freq_local):
        return pd.read_csv(freq_local), "local"

    # Public HF datasets redirect to a plain HTTP download.
    try:
        return pd.read_csv(HF_FREQ_URL), "hf_url"
    except (OSError, ValueError) as e:
        logger.debug("HF resolve URL failed: %s", e)

    # hf_hub_download uses the local HF cache and any configured token.
    if _HAS_HF:
        try:
            freq_path = hf_hub_download(
                repo_id=HF_REPO_ID, filename="freMTPL2freq.csv", repo_type="dataset"
            )
            return pd.read_csv(freq_path), "hf_hub"
        except (OSError, ValueError) as e:
            logger.debug("huggingface_hub download failed: %s", e)

    # OpenML's arff->csv converter quotes categorical values with "'".
    try:
        return pd.read_csv(OPENML_FREQ_URL, quotechar="'"), "openml"
    except (OSError, ValueError) as e:
        raise RuntimeError(
            "Could not load freMTPL2freq. Place freMTPL2freq.csv next to this "
            "module or ensure HF/OpenML access."
        ) from e


def transform(df):
    """Clean the raw frequency table into the modelling frame.

    Parameters
    ----------
    df : pd.DataFrame
        Raw freMTPL2freq table, one row per policy.

    Returns
    -------
    pd.DataFrame
        Copy with capped counts/exposure/covariates, the response ``Freq``,
        ``LogDensity``, an integer coded ``Area`` and categorical
        ``VehBrand``, ``VehGas`` and ``Region``.
    """
    # Raw headers sometimes come quoted, e.g. '"IDpol"' -> 'IDpol'
    df = df.rename(lambda x: x.replace('"', "").replace("'", ""), axis="columns").copy()
    df["IDpol"] = df["IDpol"].astype(np.int64)

    for column, cap in _CAPS.items():
        df[column] = np.minimum(df[column], cap)

    df[RESPONSE] = df["ClaimNb"] / df["Exposure"]
    df["LogDensity"] = np.log(df["Density"])

    # Area is ordinal (A = rural ... F = urban) and strongly tied to density.
    area = df["Area"].astype(str).str.strip("'\" ")
    df["Area"] = area.map({a: i for i, a in enumerate("ABCDEF", start=1)}).astype(np.int64)

    for column in CATEGORICALS:
        df[column] = df[column].astype(str).str.strip("'\" ").astype("category")

    return df.reset_index(drop=True)


def load_transform():
    """Load freMTPL2freq and apply :func:`transform`.

    - Tries a local ``freMTPL2freq.csv`` next to this module
    - Tries the HF dataset HTTP resolve URL
    - Tries huggingface_hub (if installed)
    - Falls back to OpenML
    """
    this_dir = os.path.dirname(__file__)
    local_freq = os.path.join(this_dir, "freMTPL2freq.csv")

    df, source = _read_local_or_remote(local_freq)
    logger.info("Loaded freMTPL2freq from %s (%d rows)", source, len(df))

    return transform(df)
