from __future__ import annotations

from typing import Any

import numpy as np
import scipy.sparse as sp


class InvalidArgumentError(ValueError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise InvalidArgumentError(msg)


def as_real_array(x: Any, name: str, *, allow_bool: bool = False) -> np.ndarray:
    """
    Convert `x` to a dense, real numpy array without changing its dtype.

    Rejects sparse matrices, complex values, object/string arrays and (unless
    `allow_bool`) boolean arrays.
    """
    _require(not sp.issparse(x), f"{name} must be a dense (nonsparse) array")
    try:
        arr = np.asarray(x)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"{name} must be a rectangular numeric array") from e
    _require(not np.iscomplexobj(arr), f"{name} must be real")
    if arr.dtype == np.bool_:
        _require(allow_bool, f"{name} must be numeric, not logical")
        return arr
    _require(np.issubdtype(arr.dtype, np.number), f"{name} must be numeric")
    return arr


def as_matrix3(x: Any, name: str) -> np.ndarray:
    arr = as_real_array(x, name)
    _require(arr.shape == (3, 3), f"{name} must be 3x3, got shape {arr.shape}")
    _require(bool(np.all(np.isfinite(arr))), f"{name} must be finite")
    return arr


def as_vector3(x: Any, name: str) -> np.ndarray:
    """Accepts (3,), (1,3) or (3,1) and returns a (3,) view."""
    arr = as_real_array(x, name)
    _require(arr.size == 3 and arr.ndim <= 2 and max(arr.shape, default=0) == 3, f"{name} must be a 3-element vector")
    _require(bool(np.all(np.isfinite(arr))), f"{name} must be finite")
    return arr.reshape(3)


def as_float(x: Any, name: str) -> float:
    try:
        return float(x)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"{name} must be a real scalar") from e


def as_pair(x: Any, name: str) -> tuple[Any, Any]:
    """Unpack a 2-element sequence, e.g. [fx, fy] or [rows, cols]."""
    try:
        a, b = x
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"{name} must have exactly 2 elements") from e
    return a, b
