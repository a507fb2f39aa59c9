################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Validation helpers for weighted least squares inputs."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import DTypeLike
from numpy.typing import NDArray


# Element types accepted for accumulator storage
SUPPORTED_PRECISIONS: tuple[type[np.floating[Any]], ...] = (np.float64, np.float32)


class DimensionMismatchError(ValueError):
    """Raised when an input's shape disagrees with the system dimension."""


def resolve_precision(precision: DTypeLike) -> np.dtype[Any]:
    """Return the numpy dtype for a supported floating point precision."""
    dtype: np.dtype[Any] = np.dtype(precision)
    if dtype.type not in SUPPORTED_PRECISIONS:
        raise ValueError(f"Unsupported precision {dtype.name}")
    return dtype


def require_size(size: int, name: str) -> int:
    """Return a validated non-negative dimension."""
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise TypeError(f"{name} must be an int")
    if size < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(size)


def as_vector(
    values: Any,
    length: int,
    name: str,
    dtype: DTypeLike = np.float64,
) -> NDArray[Any]:
    """Coerce an input to a 1D array of the expected length."""
    array: NDArray[Any] = np.asarray(values, dtype=dtype)
    if array.ndim != 1 or array.shape[0] != length:
        raise DimensionMismatchError(
            f"{name} must have shape ({length},), got {array.shape}"
        )
    return array


def as_matrix(
    values: Any,
    shape: tuple[int, int],
    name: str,
    dtype: DTypeLike = np.float64,
) -> NDArray[Any]:
    """Coerce an input to a 2D array of the expected shape."""
    array: NDArray[Any] = np.asarray(values, dtype=dtype)
    if array.shape != shape:
        raise DimensionMismatchError(f"{name} must have shape {shape}, got {array.shape}")
    return array


def as_scalar(value: Any, name: str, dtype: DTypeLike = np.float64) -> float:
    """Coerce a zero-dimensional input to a Python float."""
    array: NDArray[Any] = np.asarray(value, dtype=dtype)
    if array.ndim != 0:
        raise DimensionMismatchError(f"{name} must be a scalar, got {array.shape}")
    return float(array)
