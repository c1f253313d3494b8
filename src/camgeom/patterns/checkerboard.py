from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any

import numpy as np

from camgeom.core.precision import precision_of
from camgeom.validation import _require, as_real_array


def _board_dims(board_size: Any) -> tuple[int, int]:
    arr = as_real_array(board_size, "boardSize")
    _require(arr.ndim == 1 and arr.size == 2, "boardSize must be a 2-element vector [rows, cols]")
    _require(bool(np.all(np.isfinite(arr))) and bool(np.all(arr == np.round(arr))), "boardSize must contain integers")
    rows, cols = (int(x) for x in arr)
    _require(rows >= 3 and cols >= 3, "boardSize values must be >= 3")
    return rows, cols


def _square(square_size: Any) -> np.ndarray:
    s = as_real_array(square_size, "squareSize")
    _require(s.size == 1, "squareSize must be a scalar")
    s = s.reshape(())
    _require(bool(np.isfinite(s)) and float(s) > 0.0, "squareSize must be a positive finite scalar")
    return s


def generate_checkerboard_points(board_size: Any, square_size: Any) -> np.ndarray:
    """
    World coordinates of the interior corners of a checkerboard.

    board_size = (rows, cols) counts squares, so the interior grid is
    (rows-1) x (cols-1). Corner (i, j) sits at (x, y) = (j*s, i*s); the points are
    ordered column by column (all rows of column 0, then column 1, ...), with (0, 0)
    at the corner nearest the reference square.

    Returns (N,2), float32 iff square_size is a float32 value.
    """
    rows, cols = _board_dims(board_size)
    s = _square(square_size)
    dtype = precision_of(s)

    jj, ii = np.meshgrid(np.arange(cols - 1), np.arange(rows - 1), indexing="ij")
    points = np.stack([jj.reshape(-1), ii.reshape(-1)], axis=-1).astype(dtype)
    return points * s.astype(dtype)


@dataclass(frozen=True)
class CheckerboardSpec:
    rows: int
    cols: int
    square_size: float

    def __post_init__(self) -> None:
        _require(not isinstance(self.rows, bool) and not isinstance(self.cols, bool), "rows/cols must be integers")
        _require(isinstance(self.rows, numbers.Integral) and isinstance(self.cols, numbers.Integral), "rows/cols must be integers")
        _board_dims([self.rows, self.cols])
        _square(self.square_size)

    @property
    def interior_size(self) -> tuple[int, int]:
        return (self.rows - 1, self.cols - 1)

    @property
    def num_points(self) -> int:
        r, c = self.interior_size
        return r * c

    def world_points(self) -> np.ndarray:
        return generate_checkerboard_points([self.rows, self.cols], self.square_size)

    def world_points_3d(self) -> np.ndarray:
        """Planar points lifted to (N,3) with Z=0, ready for projection."""
        xy = self.world_points()
        return np.hstack([xy, np.zeros((xy.shape[0], 1), dtype=xy.dtype)])
