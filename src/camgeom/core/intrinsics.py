from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from camgeom.validation import _require, as_float, as_matrix3, as_pair


@dataclass(frozen=True)
class CameraIntrinsics:
    """
    Pinhole intrinsics of one camera.

    Two matrix conventions are exposed:
      K()                 column-vector form [[fx, s, cx], [0, fy, cy], [0, 0, 1]]
      intrinsic_matrix()  row-vector form K().T, used by camera_matrix ([R; t] @ K)

    Pixel coordinates are 0-based. image_size is (rows, cols) when known.
    """

    focal_length: tuple[float, float]
    principal_point: tuple[float, float]
    skew: float = 0.0
    image_size: tuple[int, int] | None = None

    def __post_init__(self) -> None:
        fx, fy = (as_float(f, "focal_length") for f in as_pair(self.focal_length, "focal_length"))
        cx, cy = (as_float(c, "principal_point") for c in as_pair(self.principal_point, "principal_point"))
        skew = as_float(self.skew, "skew")
        _require(all(math.isfinite(x) for x in (fx, fy, cx, cy, skew)), "intrinsics must be finite")
        _require(fx > 0.0 and fy > 0.0, "focal_length values must be > 0")
        object.__setattr__(self, "focal_length", (fx, fy))
        object.__setattr__(self, "principal_point", (cx, cy))
        object.__setattr__(self, "skew", skew)
        if self.image_size is not None:
            rows, cols = (as_float(s, "image_size") for s in as_pair(self.image_size, "image_size"))
            _require(rows.is_integer() and cols.is_integer(), "image_size must contain integers")
            _require(rows > 0 and cols > 0, "image_size values must be > 0")
            object.__setattr__(self, "image_size", (int(rows), int(cols)))

    def K(self, dtype: Any = np.float64) -> np.ndarray:
        fx, fy = self.focal_length
        cx, cy = self.principal_point
        return np.array([[fx, self.skew, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]], dtype=dtype)

    def intrinsic_matrix(self, dtype: Any = np.float64) -> np.ndarray:
        return self.K(dtype).T.copy()

    @classmethod
    def from_matrix(cls, matrix: np.ndarray, image_size: tuple[int, int] | None = None) -> "CameraIntrinsics":
        """
        Build from a 3x3 intrinsic matrix in either convention: upper-triangular
        (column-vector K) or lower-triangular (row-vector K^T).
        """
        M = as_matrix3(matrix, "intrinsicMatrix").astype(np.float64)
        if np.allclose(np.tril(M, -1), 0.0):
            K = M
        elif np.allclose(np.triu(M, 1), 0.0):
            K = M.T
        else:
            K = None
        _require(K is not None and K[2, 2] != 0.0, "intrinsicMatrix must be triangular with a nonzero [3,3] entry")
        K = K / K[2, 2]
        return cls(
            focal_length=(K[0, 0], K[1, 1]),
            principal_point=(K[0, 2], K[1, 2]),
            skew=K[0, 1],
            image_size=image_size,
        )


def intrinsics_from_dict(d: dict[str, Any]) -> CameraIntrinsics:
    _require(isinstance(d, dict), "intrinsics must be a mapping")
    if "K" in d:
        return CameraIntrinsics.from_matrix(d["K"], image_size=d.get("image_size"))
    focal = d.get("focal_length")
    pp = d.get("principal_point")
    _require(focal is not None, "intrinsics.focal_length is required")
    _require(pp is not None, "intrinsics.principal_point is required")
    _require(isinstance(focal, (list, tuple)), "intrinsics.focal_length must be [fx, fy]")
    _require(isinstance(pp, (list, tuple)), "intrinsics.principal_point must be [cx, cy]")
    return CameraIntrinsics(
        focal_length=tuple(focal),
        principal_point=tuple(pp),
        skew=d.get("skew", 0.0),
        image_size=d.get("image_size"),
    )


def intrinsics_to_dict(m: CameraIntrinsics) -> dict[str, Any]:
    d: dict[str, Any] = {
        "focal_length": list(m.focal_length),
        "principal_point": list(m.principal_point),
        "skew": m.skew,
    }
    if m.image_size is not None:
        d["image_size"] = list(m.image_size)
    return d
