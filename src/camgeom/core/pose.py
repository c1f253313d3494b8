from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from camgeom.core.precision import require_same_precision
from camgeom.validation import _require, as_matrix3, as_real_array, as_vector3


def _paired(matrix: np.ndarray, vector: np.ndarray, matrix_name: str, vector_name: str) -> tuple[np.ndarray, np.ndarray]:
    M = as_matrix3(matrix, matrix_name)
    v = as_vector3(vector, vector_name)
    dtype = require_same_precision(M, v, matrix_name, vector_name)
    return M.astype(dtype), v.astype(dtype)


def camera_pose_to_extrinsics(orientation: np.ndarray, location: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Camera pose (orientation, location in world) -> extrinsics (R, t) mapping world to camera.

    R = O^T, t = -L @ R. Returns ((3,3), (3,)).
    """
    O, L = _paired(orientation, location, "orientation", "location")
    R = O.T.copy()
    t = -(L @ R)
    return R, t


def extrinsics_to_camera_pose(rotation: np.ndarray, translation: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Extrinsics (R, t) -> camera pose (orientation, location). Exact inverse of
    `camera_pose_to_extrinsics`: O = R^T, L = -t @ O.
    """
    R, t = _paired(rotation, translation, "rotationMatrix", "translationVector")
    O = R.T.copy()
    L = -(t @ O)
    return O, L


def _array_key(a: np.ndarray) -> tuple:
    # Adding 0.0 folds -0.0 into 0.0 so equal arrays hash alike.
    return (a.dtype.str, a.shape, (a + a.dtype.type(0)).tobytes())


@dataclass(frozen=True, eq=False)
class Extrinsics:
    """
    World -> camera transform in row-vector convention: X_cam = X_world @ rotation + translation.
    """

    rotation: np.ndarray  # (3,3)
    translation: np.ndarray  # (3,)

    def __post_init__(self) -> None:
        R, t = _paired(self.rotation, self.translation, "rotationMatrix", "translationVector")
        object.__setattr__(self, "rotation", R)
        object.__setattr__(self, "translation", t)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Extrinsics):
            return NotImplemented
        return bool(
            self.dtype == other.dtype
            and np.array_equal(self.rotation, other.rotation)
            and np.array_equal(self.translation, other.translation)
        )

    def __hash__(self) -> int:
        return hash((_array_key(self.rotation), _array_key(self.translation)))

    @property
    def dtype(self) -> np.dtype:
        return self.rotation.dtype

    def to_camera_pose(self) -> "CameraPose":
        O, L = extrinsics_to_camera_pose(self.rotation, self.translation)
        return CameraPose(orientation=O, location=L)

    def transform_points(self, world_points: np.ndarray) -> np.ndarray:
        pts = as_real_array(world_points, "worldPoints")
        _require(pts.ndim == 2 and pts.shape[1] == 3, "worldPoints must be (N,3)")
        return (pts.astype(self.dtype) @ self.rotation + self.translation).astype(self.dtype)


@dataclass(frozen=True, eq=False)
class CameraPose:
    """Camera orientation and location expressed in world coordinates."""

    orientation: np.ndarray  # (3,3)
    location: np.ndarray  # (3,)

    def __post_init__(self) -> None:
        O, L = _paired(self.orientation, self.location, "orientation", "location")
        object.__setattr__(self, "orientation", O)
        object.__setattr__(self, "location", L)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CameraPose):
            return NotImplemented
        return bool(
            self.dtype == other.dtype
            and np.array_equal(self.orientation, other.orientation)
            and np.array_equal(self.location, other.location)
        )

    def __hash__(self) -> int:
        return hash((_array_key(self.orientation), _array_key(self.location)))

    @property
    def dtype(self) -> np.dtype:
        return self.orientation.dtype

    def to_extrinsics(self) -> Extrinsics:
        R, t = camera_pose_to_extrinsics(self.orientation, self.location)
        return Extrinsics(rotation=R, translation=t)
