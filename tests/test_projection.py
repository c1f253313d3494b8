from __future__ import annotations

import numpy as np
import pytest

from camgeom.core.intrinsics import CameraIntrinsics, intrinsics_from_dict, intrinsics_to_dict
from camgeom.core.projection import camera_matrix, image_to_world, world_to_image
from camgeom.core.rotation import rotation_vector_to_matrix
from camgeom.patterns.checkerboard import CheckerboardSpec
from camgeom.validation import InvalidArgumentError


def _intrinsics() -> CameraIntrinsics:
    return CameraIntrinsics(focal_length=(800.0, 780.0), principal_point=(320.0, 240.0), skew=0.5, image_size=(480, 640))


def _extrinsics() -> tuple[np.ndarray, np.ndarray]:
    R = rotation_vector_to_matrix([0.1, -0.2, 0.05])
    t = np.array([-40.0, -30.0, 600.0])
    return R, t


def test_camera_matrix_shape_and_formula():
    intr = _intrinsics()
    R, t = _extrinsics()
    P = camera_matrix(intr, R, t)
    assert P.shape == (4, 3)
    assert P.dtype == np.float64
    expected = np.vstack([R, t]) @ intr.intrinsic_matrix()
    assert np.max(np.abs(P - expected)) < 1e-9

    for t_shaped in (t.reshape(1, 3), t.reshape(3, 1)):
        assert camera_matrix(intr, R, t_shaped).shape == (4, 3)


def test_camera_matrix_accepts_raw_row_vector_intrinsic_matrix():
    intr = _intrinsics()
    R, t = _extrinsics()
    P = camera_matrix(intr.intrinsic_matrix(), R, t)
    assert np.max(np.abs(P - camera_matrix(intr, R, t))) < 1e-12


def test_camera_matrix_projects_like_column_convention():
    intr = _intrinsics()
    R, t = _extrinsics()
    X = np.array([12.0, -7.0, 30.0])
    xyw = np.append(X, 1.0) @ camera_matrix(intr, R, t)
    uv = xyw[:2] / xyw[2]

    Xc = intr.K() @ (R.T @ X + t)
    assert np.max(np.abs(uv - Xc[:2] / Xc[2])) < 1e-9


def test_camera_matrix_precision_follows_rotation():
    intr = _intrinsics()
    R, t = _extrinsics()
    P = camera_matrix(intr.intrinsic_matrix(np.float64), R.astype(np.float32), t.astype(np.float32))
    assert P.dtype == np.float32
    with pytest.raises(InvalidArgumentError):
        camera_matrix(intr, R.astype(np.float32), t)


@pytest.mark.parametrize(
    "R,t",
    [(np.eye(2), np.zeros(3)), (np.eye(3), np.zeros(4)), (np.full((3, 3), np.inf), np.zeros(3))],
)
def test_camera_matrix_rejects_invalid(R, t):
    with pytest.raises(InvalidArgumentError):
        camera_matrix(_intrinsics(), R, t)


def test_world_to_image_and_back_on_board_plane():
    intr = _intrinsics()
    R, t = _extrinsics()
    board = CheckerboardSpec(rows=7, cols=9, square_size=25.0)
    uv = world_to_image(intr, R, t, board.world_points_3d())
    assert uv.shape == (board.num_points, 2)
    xy = image_to_world(intr, R, t, uv)
    assert np.max(np.abs(xy - board.world_points())) < 1e-8


def test_world_to_image_output_class_follows_points():
    intr = _intrinsics()
    R, t = _extrinsics()
    pts = np.array([[0.0, 0.0, 0.0], [10.0, 5.0, 1.0]], dtype=np.float32)
    uv32 = world_to_image(intr, R, t, pts)
    uv64 = world_to_image(intr, R, t, pts.astype(np.float64))
    assert uv32.dtype == np.float32
    assert uv64.dtype == np.float64
    assert np.max(np.abs(uv32 - uv64)) < 1e-3


def test_image_to_world_empty():
    R, t = _extrinsics()
    out = image_to_world(_intrinsics(), R, t, np.zeros((0, 2)))
    assert out.shape == (0, 2)


def test_intrinsics_from_matrix_either_convention():
    intr = _intrinsics()
    a = CameraIntrinsics.from_matrix(intr.K())
    b = CameraIntrinsics.from_matrix(intr.intrinsic_matrix())
    for m in (a, b):
        assert m.focal_length == pytest.approx(intr.focal_length)
        assert m.principal_point == pytest.approx(intr.principal_point)
        assert m.skew == pytest.approx(intr.skew)
    with pytest.raises(InvalidArgumentError):
        CameraIntrinsics.from_matrix(np.ones((3, 3)))


def test_intrinsics_dict_roundtrip_and_validation():
    intr = _intrinsics()
    assert intrinsics_from_dict(intrinsics_to_dict(intr)) == intr
    with pytest.raises(InvalidArgumentError):
        intrinsics_from_dict({"principal_point": [1.0, 2.0]})
    with pytest.raises(InvalidArgumentError):
        CameraIntrinsics(focal_length=(-1.0, 1.0), principal_point=(0.0, 0.0))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"focal_length": 5.0, "principal_point": (0.0, 0.0)},
        {"focal_length": ("a", 1.0), "principal_point": (0.0, 0.0)},
        {"focal_length": (1.0, 1.0, 1.0), "principal_point": (0.0, 0.0)},
        {"focal_length": (1.0, 1.0), "principal_point": None},
        {"focal_length": (1.0, 1.0), "principal_point": (0.0, 0.0), "skew": "s"},
        {"focal_length": (1.0, 1.0), "principal_point": (0.0, 0.0), "image_size": 480},
        {"focal_length": (1.0, 1.0), "principal_point": (0.0, 0.0), "image_size": (480.5, 640)},
    ],
)
def test_intrinsics_reject_malformed_values(kwargs):
    with pytest.raises(InvalidArgumentError):
        CameraIntrinsics(**kwargs)
