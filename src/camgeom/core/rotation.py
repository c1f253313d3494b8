from __future__ import annotations

import logging

import numpy as np
from scipy.spatial.transform import Rotation as Rot

from camgeom.core.precision import near_pi_tolerance, precision_of, zero_angle_tolerance
from camgeom.validation import as_matrix3, as_vector3

logger = logging.getLogger(__name__)


def skew_symmetric(v: np.ndarray) -> np.ndarray:
    """Cross-product matrix [v]x such that [v]x @ w == cross(v, w)."""
    v = as_vector3(v, "vector")
    return np.array(
        [[0.0, -v[2], v[1]], [v[2], 0.0, -v[0]], [-v[1], v[0], 0.0]],
        dtype=precision_of(v),
    )


def rotation_vector_to_matrix(rotation_vector: np.ndarray) -> np.ndarray:
    """
    Rodrigues formula: axis-angle vector -> 3x3 rotation matrix.

    The vector direction is the rotation axis and its norm the angle in radians.
    Output dtype follows the input (float32 stays float32, everything else is float64).
    """
    v = as_vector3(rotation_vector, "rotationVector")
    dtype = precision_of(v)
    v = v.astype(dtype)

    theta = float(np.linalg.norm(v))
    if theta < zero_angle_tolerance(dtype):
        return np.eye(3, dtype=dtype)

    return Rot.from_rotvec(v.astype(np.float64)).as_matrix().astype(dtype)


def rotation_matrix_to_vector(rotation_matrix: np.ndarray) -> np.ndarray:
    """
    Inverse Rodrigues formula: 3x3 rotation matrix -> axis-angle vector.

    The returned angle is canonicalized into [0, pi]. Orthonormality of the input
    is assumed, not verified.
    """
    R = as_matrix3(rotation_matrix, "rotationMatrix")
    dtype = precision_of(R)
    Rd = R.astype(np.float64)

    w = np.array([Rd[2, 1] - Rd[1, 2], Rd[0, 2] - Rd[2, 0], Rd[1, 0] - Rd[0, 1]])
    cos_theta = float(np.clip((np.trace(Rd) - 1.0) / 2.0, -1.0, 1.0))
    # Same angle as acos(cos_theta), without its loss of accuracy near 0 and pi.
    theta = float(np.arctan2(0.5 * np.linalg.norm(w), cos_theta))
    if theta < zero_angle_tolerance(dtype):
        return np.zeros(3, dtype=dtype)

    if np.pi - theta < near_pi_tolerance(dtype):
        # sin(theta) ~ 0: the skew part vanishes, so read the axis off the symmetric
        # part, whose eigenvector with eigenvalue (1 - cos) is the axis.
        S = 0.5 * (Rd + Rd.T) - cos_theta * np.eye(3)
        _evals, evecs = np.linalg.eigh(S)
        axis = evecs[:, -1]
        side = float(np.dot(axis, w))
        if side < 0.0 or (side == 0.0 and axis[np.argmax(np.abs(axis))] < 0.0):
            axis = -axis
        logger.debug("rotation angle %.17g is near pi, axis taken from symmetric part", theta)
    else:
        axis = w / (2.0 * np.sin(theta))

    axis = axis / np.linalg.norm(axis)
    return (axis * theta).astype(dtype)
