"""Seeding and row-sampling helpers shared by the explanation methods.

All randomness goes through ``numpy.random.default_rng`` seeded with a list
``[seed, *keys]``, so a (covariate, repeat) or a permutation index always
gets the same stream no matter in which order the work is done.
"""

import numbers

import numpy as np

from ._errors import InputError

# Default cap of background rows for breakdown and profiles.
DEFAULT_N_MAX = 500


def resolve_seed(seed):
    """Return ``seed`` as a non-negative int, drawing fresh entropy for None."""
    if seed is None:
        return int(np.random.SeedSequence().entropy)
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral) or seed < 0:
        raise InputError(f"seed must be a non-negative integer, got {seed!r}")
    return int(seed)


def rng_for(seed, *keys):
    return np.random.default_rng([seed, *keys])


def sample_rows(frame, n_max, seed):
    """At most ``n_max`` rows of ``frame`` without replacement, original order kept."""
    if n_max is None or len(frame) <= n_max:
        return frame.reset_index(drop=True)
    if n_max < 1:
        raise InputError(f"n_max must be at least 1, got {n_max}")
    picked = np.sort(rng_for(seed).choice(len(frame), size=n_max, replace=False))
    return frame.iloc[picked].reset_index(drop=True)


def broadcast(column, index):
    """Repeat the single value of ``column`` over ``index`` keeping its dtype."""
    return column.iloc[np.zeros(len(index), dtype=np.intp)].set_axis(index)
