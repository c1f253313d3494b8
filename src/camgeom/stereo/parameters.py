from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from camgeom.core.intrinsics import CameraIntrinsics, intrinsics_from_dict, intrinsics_to_dict
from camgeom.core.pose import _array_key
from camgeom.core.precision import require_same_precision
from camgeom.core.rotation import rotation_matrix_to_vector, rotation_vector_to_matrix, skew_symmetric
from camgeom.validation import _require, as_matrix3, as_vector3


@dataclass(frozen=True, eq=False)
class StereoRectification:
    """
    Rotations (column-vector form) that make both image planes coplanar and
    row-aligned, the baseline expressed in the rectified frame, and the common
    intrinsics of the rectified pair.
    """

    rotation1: np.ndarray  # (3,3)
    rotation2: np.ndarray  # (3,3)
    translation: np.ndarray  # (3,), along +/- x
    intrinsics: CameraIntrinsics

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StereoRectification):
            return NotImplemented
        return bool(
            self.intrinsics == other.intrinsics
            and np.array_equal(self.rotation1, other.rotation1)
            and np.array_equal(self.rotation2, other.rotation2)
            and np.array_equal(self.translation, other.translation)
        )

    def __hash__(self) -> int:
        return hash((self.intrinsics, _array_key(self.rotation1), _array_key(self.rotation2), _array_key(self.translation)))


def _row_alignment_rotation(t: np.ndarray) -> np.ndarray:
    # Rotate t onto the x axis (keeping its sign along x).
    x_axis = np.array([1.0, 0.0, 0.0])
    if np.dot(x_axis, t) < 0:
        x_axis = -x_axis
    axis = np.cross(t, x_axis)
    norm = np.linalg.norm(axis)
    if norm == 0.0:
        return np.eye(3)
    angle = np.arccos(np.clip(abs(np.dot(t, x_axis)) / np.linalg.norm(t), -1.0, 1.0))
    return rotation_vector_to_matrix(axis / norm * angle)


@dataclass(frozen=True, eq=False)
class StereoParameters:
    """
    Calibrated stereo pair.

    Convention (row vectors): a point in camera-1 coordinates maps into camera 2 as
      X_2 = X_1 @ rotation_of_camera2 + translation_of_camera2

    camera2 defaults to camera1 when only one set of intrinsics is known.
    """

    camera1: CameraIntrinsics
    rotation_of_camera2: np.ndarray  # (3,3)
    translation_of_camera2: np.ndarray  # (3,)
    camera2: CameraIntrinsics | None = None

    def __post_init__(self) -> None:
        _require(isinstance(self.camera1, CameraIntrinsics), "camera1 must be CameraIntrinsics")
        if self.camera2 is None:
            object.__setattr__(self, "camera2", self.camera1)
        _require(isinstance(self.camera2, CameraIntrinsics), "camera2 must be CameraIntrinsics")
        R = as_matrix3(self.rotation_of_camera2, "rotationOfCamera2")
        t = as_vector3(self.translation_of_camera2, "translationOfCamera2")
        require_same_precision(R, t, "rotationOfCamera2", "translationOfCamera2")
        _require(bool(np.any(t != 0)), "translationOfCamera2 must be nonzero (no stereo baseline)")
        object.__setattr__(self, "rotation_of_camera2", R.astype(np.float64))
        object.__setattr__(self, "translation_of_camera2", t.astype(np.float64))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StereoParameters):
            return NotImplemented
        return bool(
            self.camera1 == other.camera1
            and self.camera2 == other.camera2
            and np.array_equal(self.rotation_of_camera2, other.rotation_of_camera2)
            and np.array_equal(self.translation_of_camera2, other.translation_of_camera2)
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.camera1,
                self.camera2,
                _array_key(self.rotation_of_camera2),
                _array_key(self.translation_of_camera2),
            )
        )

    @property
    def baseline(self) -> float:
        return float(np.linalg.norm(self.translation_of_camera2))

    @property
    def essential_matrix(self) -> np.ndarray:
        return skew_symmetric(self.translation_of_camera2) @ self.rotation_of_camera2.T

    @property
    def fundamental_matrix(self) -> np.ndarray:
        """x2^T F x1 = 0 for homogeneous pixel column vectors of a matched pair."""
        K1 = self.camera1.K()
        K2 = self.camera2.K()
        return np.linalg.inv(K2).T @ self.essential_matrix @ np.linalg.inv(K1)

    def rectified_intrinsics(self) -> CameraIntrinsics:
        f = min(self.camera1.focal_length[0], self.camera2.focal_length[0])
        cy = 0.5 * (self.camera1.principal_point[1] + self.camera2.principal_point[1])
        return CameraIntrinsics(
            focal_length=(f, f),
            principal_point=(self.camera1.principal_point[0], cy),
            skew=0.0,
            image_size=self.camera1.image_size,
        )

    def rectification(self) -> StereoRectification:
        # Split the relative rotation in two halves so both cameras turn equally.
        r = rotation_matrix_to_vector(self.rotation_of_camera2.T)
        R_right = rotation_vector_to_matrix(r / -2.0)
        R_left = R_right.T

        t = R_right @ self.translation_of_camera2
        R_align = _row_alignment_rotation(t)
        return StereoRectification(
            rotation1=R_align @ R_left,
            rotation2=R_align @ R_right,
            translation=R_align @ t,
            intrinsics=self.rectified_intrinsics(),
        )

    def reprojection_matrix(self, dtype: Any = np.float64) -> np.ndarray:
        """
        4x4 Q such that [u, v, disparity, 1] @ Q = [X, Y, Z, W] * s, with the 3-D
        point (X, Y, Z) / W in the rectified camera-1 frame.
        """
        rect = self.rectification()
        tx = float(rect.translation[0])
        cx, cy = rect.intrinsics.principal_point
        f = rect.intrinsics.focal_length[1]
        Q = np.array(
            [
                [1.0, 0.0, 0.0, -cx],
                [0.0, 1.0, 0.0, -cy],
                [0.0, 0.0, 0.0, f],
                [0.0, 0.0, -1.0 / tx, 0.0],
            ]
        ).T
        return Q.astype(dtype)


def stereo_parameters_from_dict(d: dict[str, Any]) -> StereoParameters:
    _require(isinstance(d, dict), "stereo parameters must be a mapping")
    for key in ("camera1", "rotation_of_camera2", "translation_of_camera2"):
        _require(key in d, f"stereo parameters missing required field: {key}")
    camera2 = d.get("camera2")
    return StereoParameters(
        camera1=intrinsics_from_dict(d["camera1"]),
        camera2=None if camera2 is None else intrinsics_from_dict(camera2),
        rotation_of_camera2=d["rotation_of_camera2"],
        translation_of_camera2=d["translation_of_camera2"],
    )


def stereo_parameters_to_dict(p: StereoParameters) -> dict[str, Any]:
    return {
        "camera1": intrinsics_to_dict(p.camera1),
        "camera2": intrinsics_to_dict(p.camera2),
        "rotation_of_camera2": p.rotation_of_camera2.tolist(),
        "translation_of_camera2": p.translation_of_camera2.tolist(),
    }
