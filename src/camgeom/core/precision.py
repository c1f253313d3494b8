from __future__ import annotations

import numpy as np

from camgeom.validation import _require

SINGLE = np.dtype(np.float32)
DOUBLE = np.dtype(np.float64)


def precision_of(arr: np.ndarray) -> np.dtype:
    """float32 stays single; every other real dtype (ints, float64, ...) is double."""
    return SINGLE if np.asarray(arr).dtype == SINGLE else DOUBLE


def require_same_precision(a: np.ndarray, b: np.ndarray, name_a: str, name_b: str) -> np.dtype:
    pa = precision_of(a)
    pb = precision_of(b)
    _require(pa == pb, f"{name_a} and {name_b} must have the same numeric class ({pa.name} vs {pb.name})")
    return pa


def zero_angle_tolerance(dtype: np.dtype) -> float:
    # Below this angle a rotation is treated as the identity.
    return float(np.finfo(dtype).eps)


def near_pi_tolerance(dtype: np.dtype) -> float:
    # Within this distance of pi the axis is taken from the symmetric part.
    return float(np.finfo(dtype).eps) ** 0.25


def unreliable_disparity_values(dtype: np.dtype) -> tuple[float, ...]:
    """
    Sentinel disparities marking unmatched pixels.

    External block-matching routines emit -realmax(single) for both single and
    double maps, so double maps honour both sentinels.
    """
    single = -float(np.finfo(SINGLE).max)
    if np.dtype(dtype) == SINGLE:
        return (single,)
    return (-float(np.finfo(DOUBLE).max), single)
