import hashlib

import numpy as np


def _bucket(id_value):
    """Map an id (or tuple of ids) to a stable bucket in [0, 100)."""
    if isinstance(id_value, tuple):
        id_value = "_".join(str(v) for v in id_value)
    hash_int = int(hashlib.md5(str(id_value).encode()).hexdigest(), 16)
    return hash_int % 100


def create_sample_split(df, id_column, training_frac=0.8):
    """Create sample split based on ID column(s).

    Parameters
    ----------
    df : pd.DataFrame
        Training data
    id_column : str or list of str
        Name of ID column, or several columns jointly identifying a row
    training_frac : float, optional
        Fraction to use for training, by default 0.8

    Returns
    -------
    pd.DataFrame
        Copy of the data with a ``sample`` column containing "train"/"test".
        The assignment depends only on the ids, so it is stable across runs
        and row orders.
    """
    if not 0 < training_frac < 1:
        raise ValueError(f"training_frac must be in (0, 1), got {training_frac}")

    columns = [id_column] if isinstance(id_column, str) else list(id_column)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Unknown id column(s): {missing}")

    if len(columns) == 1:
        ids = df[columns[0]]
    else:
        ids = df[columns].apply(tuple, axis=1)

    buckets = ids.map(_bucket).to_numpy()
    threshold = int(training_frac * 100)

    df = df.copy()
    df["sample"] = np.where(buckets < threshold, "train", "test")
    return df
