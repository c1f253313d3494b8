from __future__ import annotations

import logging
from typing import Any

import numpy as np

from camgeom.core.precision import DOUBLE, SINGLE, unreliable_disparity_values
from camgeom.stereo.parameters import StereoParameters, stereo_parameters_from_dict
from camgeom.validation import InvalidArgumentError, _require, as_real_array

logger = logging.getLogger(__name__)


def _stereo_params(stereo_params: Any) -> StereoParameters:
    if isinstance(stereo_params, StereoParameters):
        return stereo_params
    if isinstance(stereo_params, dict):
        return stereo_parameters_from_dict(stereo_params)
    raise InvalidArgumentError("stereoParams must be StereoParameters or a mapping of its fields")


def reconstruct_scene(disparity_map: Any, stereo_params: Any) -> np.ndarray:
    """
    Reconstruct an (H,W,3) point cloud from a disparity map of a rectified pair.

    Each pixel (u, v) with disparity d is reprojected as [u, v, d, 1] @ Q, giving
    depth Z = f * baseline / d in the rectified camera-1 frame.

    - unreliable pixels (disparity == -realmax sentinel) -> (NaN, NaN, NaN)
    - zero disparity -> point at infinity, signed per axis
    - output is float64 iff the disparity map is float64, else float32
    """
    disp = as_real_array(disparity_map, "disparityMap")
    _require(disp.ndim == 2, f"disparityMap must be 2-D, got shape {disp.shape}")
    params = _stereo_params(stereo_params)

    dtype = DOUBLE if disp.dtype == DOUBLE else SINGLE
    d = disp.astype(dtype)
    Q = params.reprojection_matrix(dtype)

    h, w = d.shape
    vv, uu = np.meshgrid(np.arange(h, dtype=dtype), np.arange(w, dtype=dtype), indexing="ij")
    zero = d == 0
    # Sentinel disparities may overflow here; they are overwritten below.
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        homog = np.stack([uu, vv, d, np.ones_like(d)], axis=-1) @ Q
        num = homog[..., :3]
        points = num / homog[..., 3:4]

    if np.any(zero):
        # W = d * Q[2, 3] vanishes; the direction of infinity follows the numerator and
        # the sign of Q[2, 3].
        sign_w = np.sign(Q[2, 3])
        points[zero] = np.copysign(np.asarray(np.inf, dtype=dtype), num[zero]) * sign_w
        logger.debug("%d pixels with zero disparity reconstructed at infinity", int(zero.sum()))

    invalid = np.isin(d, np.asarray(unreliable_disparity_values(dtype), dtype=dtype))
    if np.any(invalid):
        points[invalid] = np.nan
        logger.debug("%d unreliable disparity pixels set to NaN", int(invalid.sum()))

    return points.astype(dtype, copy=False)
