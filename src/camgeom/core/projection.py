from __future__ import annotations

from typing import Any

import numpy as np

from camgeom.core.intrinsics import CameraIntrinsics
from camgeom.core.precision import DOUBLE, SINGLE, precision_of, require_same_precision
from camgeom.validation import _require, as_matrix3, as_real_array, as_vector3


def _intrinsic_matrix(intrinsics: Any, dtype: np.dtype) -> np.ndarray:
    if isinstance(intrinsics, CameraIntrinsics):
        return intrinsics.intrinsic_matrix(dtype)
    return as_matrix3(intrinsics, "intrinsicMatrix").astype(dtype)


def _extrinsics(rotation: np.ndarray, translation: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    R = as_matrix3(rotation, "rotationMatrix")
    t = as_vector3(translation, "translationVector")
    require_same_precision(R, t, "rotationMatrix", "translationVector")
    return R, t


def camera_matrix(intrinsics: Any, rotation: np.ndarray, translation: np.ndarray) -> np.ndarray:
    """
    4x3 projection matrix P = [R; t] @ K (row-vector convention).

    A homogeneous world point [X Y Z 1] maps to homogeneous image coordinates
    [x y w] = [X Y Z 1] @ P.

    `intrinsics` is a CameraIntrinsics or a raw 3x3 matrix already in row-vector
    form [[fx,0,0],[s,fy,0],[cx,cy,1]]. The output is float64 iff the rotation is;
    K is cast to match.
    """
    R, t = _extrinsics(rotation, translation)
    dtype = precision_of(R)
    K = _intrinsic_matrix(intrinsics, dtype)
    Rt = np.vstack([R.astype(dtype), t.astype(dtype)[None, :]])
    return (Rt @ K).astype(dtype)


def world_to_image(intrinsics: Any, rotation: np.ndarray, translation: np.ndarray, world_points: np.ndarray) -> np.ndarray:
    """
    Project (N,3) world points to (N,2) image points through `camera_matrix`.

    Computation runs in double if any operand is double; the output is float64
    iff the world points are.
    """
    R, t = _extrinsics(rotation, translation)
    pts = as_real_array(world_points, "worldPoints")
    _require(pts.ndim == 2 and pts.shape[1] == 3 and pts.shape[0] > 0, "worldPoints must be a nonempty (N,3) array")

    out_dtype = precision_of(pts)
    work = DOUBLE if DOUBLE in (precision_of(R), out_dtype) else SINGLE
    P = camera_matrix(intrinsics, R.astype(work), t.astype(work))
    homog = np.hstack([pts.astype(work), np.ones((pts.shape[0], 1), dtype=work)]) @ P
    return (homog[:, :2] / homog[:, 2:3]).astype(out_dtype)


def image_to_world(intrinsics: Any, rotation: np.ndarray, translation: np.ndarray, image_points: np.ndarray) -> np.ndarray:
    """
    Back-project (N,2) image points onto the world plane Z=0.

    Uses the plane homography H = [r1; r2; t] @ K (rows r1, r2 of the rotation),
    so [X Y 1] @ H ~ [u v 1]. Returns (N,2) world points (float64 iff the image
    points are double).
    """
    R, t = _extrinsics(rotation, translation)
    pts = as_real_array(image_points, "imagePoints")
    _require(pts.ndim == 2 and pts.shape[1] == 2, "imagePoints must be an (N,2) array")

    out_dtype = precision_of(pts)
    if pts.shape[0] == 0:
        return np.zeros((0, 2), dtype=out_dtype)

    work = DOUBLE if DOUBLE in (precision_of(R), out_dtype) else SINGLE
    K = _intrinsic_matrix(intrinsics, work)
    H = np.vstack([R[0].astype(work), R[1].astype(work), t.astype(work)]) @ K
    uv1 = np.hstack([pts.astype(work), np.ones((pts.shape[0], 1), dtype=work)])
    # Solve U = X @ H for X, i.e. H^T X^T = U^T.
    XY = np.linalg.solve(H.T, uv1.T).T
    return (XY[:, :2] / XY[:, 2:3]).astype(out_dtype)
