################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################
"""Linear algebra utilities for information matrices."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


class Linalg:
    """General linear algebra helpers."""

    @staticmethod
    def add_to_diagonal(mat: NDArray[Any], values: float | NDArray[Any]) -> None:
        """Add a scalar or per-element vector to the diagonal in place."""
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValueError("mat must be a square matrix")
        idx: NDArray[np.intp] = np.arange(mat.shape[0])
        mat[idx, idx] += values

    @staticmethod
    def symmetrize(mat: NDArray[Any]) -> NDArray[Any]:
        """Return 0.5 * (A + Aᵀ)."""
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValueError("mat must be a square matrix")
        return 0.5 * (mat + mat.T)
