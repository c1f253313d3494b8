from __future__ import annotations

import logging
from typing import Any

import numpy as np

from camgeom.core.precision import SINGLE
from camgeom.validation import _require, as_real_array

logger = logging.getLogger(__name__)


def is_filter_separable(kernel: Any) -> tuple[bool, np.ndarray, np.ndarray]:
    """
    Test a 2-D kernel for separability and factor it when it is rank 1.

    Returns (separable, col_kernel, row_kernel) with col_kernel (m,1) and
    row_kernel (1,n) such that col_kernel @ row_kernel reproduces the kernel;
    both carry sqrt(sigma_1) of the energy. Non-separable kernels return (0,0)
    empty arrays.

    Rank is the number of singular values above max(m,n) * spacing(sigma_1).
    Kernels with NaN/Inf entries are reported as not separable.
    """
    H = as_real_array(kernel, "kernel", allow_bool=True)
    _require(H.ndim == 2, f"kernel must be 2-D, got shape {H.shape}")
    _require(H.size > 0, "kernel must be nonempty")

    dtype = SINGLE if H.dtype == SINGLE else np.dtype(np.float64)
    H = H.astype(dtype)
    empty = np.zeros((0, 0), dtype=dtype)

    if not np.all(np.isfinite(H)):
        logger.debug("kernel has non-finite values, skipping separability test")
        return False, empty, empty

    U, s, Vh = np.linalg.svd(H, full_matrices=False)
    tol = max(H.shape) * np.spacing(s[0])
    rank = int(np.sum(s > tol))
    if rank != 1:
        logger.debug("kernel rank %d, not separable", rank)
        return False, empty, empty

    scale = np.sqrt(s[0])
    col_kernel = (U[:, 0] * scale).reshape(-1, 1)
    row_kernel = (Vh[0, :] * scale).reshape(1, -1)
    return True, col_kernel.astype(dtype), row_kernel.astype(dtype)
