################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""
Symmetric positive-definite decompositions for solving normal equations.

A decomposition factorizes a square information matrix once with
compute() and then solves any number of right-hand sides against that
factorization with backsub(). The WLS accumulator depends only on the
Decomposition protocol below; concrete strategies are chosen by the caller:

    Cholesky  LLᵀ factorization. Fails on singular or indefinite input.
    SQSVD     Symmetric SVD. Singular values smaller than
              max(s) / condition are discarded, so rank-deficient systems
              yield the minimum-norm solution instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Optional
from typing import Protocol
from typing import runtime_checkable

import numpy as np
import scipy.linalg as la
from numpy.typing import DTypeLike
from numpy.typing import NDArray

from oasis_wls.estimation.wls.math_utils.linalg import Linalg
from oasis_wls.estimation.wls.math_utils.validation import DimensionMismatchError
from oasis_wls.estimation.wls.math_utils.validation import as_vector
from oasis_wls.estimation.wls.math_utils.validation import resolve_precision


# Default ratio between the largest and smallest retained singular value
SVD_CONDITION: float = 1e9


class DecompositionError(Exception):
    """Raised when a decomposition is used incorrectly."""


class NotPositiveDefiniteError(DecompositionError, np.linalg.LinAlgError):
    """Raised when a matrix cannot be factorized as positive-definite."""


@runtime_checkable
class Decomposition(Protocol):
    """Capability interface consumed by the WLS accumulator."""

    def compute(self, matrix: NDArray[Any]) -> None:
        """Factorize a symmetric matrix, replacing any previous factorization."""
        ...

    def backsub(self, vector: NDArray[Any]) -> NDArray[Any]:
        """Solve matrix · x = vector against the last factorization."""
        ...

    def get_inverse(self) -> NDArray[Any]:
        """Return the inverse of the last factorized matrix."""
        ...

    def determinant(self) -> float:
        """Return the determinant of the last factorized matrix."""
        ...


# Builds a decomposition for a given dimension and element type
DecompositionFactory = Callable[[int, np.dtype[Any]], Decomposition]


def _as_square(
    matrix: NDArray[Any],
    size: int,
    dtype: np.dtype[Any],
) -> NDArray[Any]:
    mat: NDArray[Any] = np.asarray(matrix, dtype=dtype)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise DimensionMismatchError(f"matrix must be square, got {mat.shape}")
    if size > 0 and mat.shape[0] != size:
        raise DimensionMismatchError(
            f"matrix must have shape ({size}, {size}), got {mat.shape}"
        )
    if not np.all(np.isfinite(mat)):
        raise NotPositiveDefiniteError("matrix contains non-finite values")
    return mat


@dataclass(frozen=True)
class _SvdFactor:
    U: NDArray[Any]
    s: NDArray[Any]
    inv_s: NDArray[Any]
    Vt: NDArray[Any]


class Cholesky:
    """
    Cholesky decomposition of a symmetric positive-definite matrix.

    Only the lower triangle of the input is referenced.
    """

    def __init__(self, size: int = 0, dtype: DTypeLike = np.float64) -> None:
        # Zero means the dimension is taken from each computed matrix
        self._size: int = int(size)
        self._dtype: np.dtype[Any] = resolve_precision(dtype)
        self._factor: Optional[tuple[NDArray[Any], bool]] = None
        self._dim: int = 0

    def compute(self, matrix: NDArray[Any]) -> None:
        mat: NDArray[Any] = _as_square(matrix, self._size, self._dtype)

        # Drop the previous factorization so a failure cannot be solved against
        self._factor = None

        dim: int = int(mat.shape[0])
        if dim == 0:
            self._factor = (mat.copy(), True)
            self._dim = 0
            return

        try:
            self._factor = la.cho_factor(mat, lower=True, check_finite=False)
        except np.linalg.LinAlgError as exc:
            raise NotPositiveDefiniteError(
                "Information matrix is not positive definite"
            ) from exc
        self._dim = dim

    def backsub(self, vector: NDArray[Any]) -> NDArray[Any]:
        factor: tuple[NDArray[Any], bool] = self._require_factor()
        rhs: NDArray[Any] = as_vector(vector, self._dim, "vector", self._dtype)
        if self._dim == 0:
            return rhs.copy()
        return np.asarray(
            la.cho_solve(factor, rhs, check_finite=False), dtype=self._dtype
        )

    def get_inverse(self) -> NDArray[Any]:
        factor: tuple[NDArray[Any], bool] = self._require_factor()
        eye: NDArray[Any] = np.eye(self._dim, dtype=self._dtype)
        if self._dim == 0:
            return eye
        inverse: NDArray[Any] = la.cho_solve(factor, eye, check_finite=False)
        return np.asarray(Linalg.symmetrize(inverse), dtype=self._dtype)

    def determinant(self) -> float:
        factor: tuple[NDArray[Any], bool] = self._require_factor()
        diag: NDArray[Any] = np.diag(factor[0])
        return float(np.prod(diag.astype(np.float64)) ** 2)

    def get_L(self) -> NDArray[Any]:
        """Return the lower-triangular factor L with A = LLᵀ."""
        factor: tuple[NDArray[Any], bool] = self._require_factor()
        return np.tril(factor[0])

    def _require_factor(self) -> tuple[NDArray[Any], bool]:
        if self._factor is None:
            raise DecompositionError("compute() must succeed before solving")
        return self._factor


class SQSVD:
    """
    Singular value decomposition of a square symmetric matrix.

    The input is symmetrized before factorization as A = U diag(s) Vᵀ.
    Back-substitution applies the pseudo-inverse V diag(1/s) Uᵀ restricted to
    singular values above max(s) / condition. U and V differ in sign along
    directions with negative eigenvalues, so indefinite input is solved
    correctly.
    """

    def __init__(
        self,
        size: int = 0,
        dtype: DTypeLike = np.float64,
        *,
        condition: float = SVD_CONDITION,
    ) -> None:
        if not condition > 0.0:
            raise ValueError("condition must be positive")
        self._size: int = int(size)
        self._dtype: np.dtype[Any] = resolve_precision(dtype)
        self._condition: float = float(condition)
        self._factor: Optional[_SvdFactor] = None

    @property
    def condition(self) -> float:
        return self._condition

    def compute(self, matrix: NDArray[Any]) -> None:
        mat: NDArray[Any] = _as_square(matrix, self._size, self._dtype)

        self._factor = None

        U: NDArray[Any]
        s: NDArray[Any]
        Vt: NDArray[Any]
        if mat.shape[0] == 0:
            U = np.zeros((0, 0), dtype=self._dtype)
            s = np.zeros((0,), dtype=self._dtype)
            Vt = np.zeros((0, 0), dtype=self._dtype)
        else:
            U, s, Vt = np.linalg.svd(Linalg.symmetrize(mat))

        inv_s: NDArray[Any] = np.zeros_like(s)
        if s.size > 0 and s[0] > 0.0:
            keep: NDArray[np.bool_] = s > s[0] / self._condition
            inv_s[keep] = 1.0 / s[keep]

        self._factor = _SvdFactor(
            U=np.asarray(U, dtype=self._dtype),
            s=np.asarray(s, dtype=self._dtype),
            inv_s=np.asarray(inv_s, dtype=self._dtype),
            Vt=np.asarray(Vt, dtype=self._dtype),
        )

    def backsub(self, vector: NDArray[Any]) -> NDArray[Any]:
        factor: _SvdFactor = self._require_factor()
        rhs: NDArray[Any] = as_vector(vector, factor.U.shape[0], "vector", self._dtype)
        return np.asarray(
            factor.Vt.T @ (factor.inv_s * (factor.U.T @ rhs)), dtype=self._dtype
        )

    def get_inverse(self) -> NDArray[Any]:
        factor: _SvdFactor = self._require_factor()
        return np.asarray((factor.Vt.T * factor.inv_s) @ factor.U.T, dtype=self._dtype)

    def determinant(self) -> float:
        factor: _SvdFactor = self._require_factor()
        if factor.s.size == 0:
            return 1.0

        # det(U) and det(Vᵀ) are each ±1 and carry the sign of det(A)
        U64: NDArray[np.float64] = factor.U.astype(np.float64)
        Vt64: NDArray[np.float64] = factor.Vt.astype(np.float64)
        sign: float = float(np.sign(np.linalg.det(U64) * np.linalg.det(Vt64)))
        return sign * float(np.prod(factor.s.astype(np.float64)))

    def rank(self) -> int:
        """Return the number of singular values kept by the condition cut-off."""
        factor: _SvdFactor = self._require_factor()
        return int(np.count_nonzero(factor.inv_s))

    def get_singular_values(self) -> NDArray[Any]:
        factor: _SvdFactor = self._require_factor()
        return factor.s.copy()

    def _require_factor(self) -> _SvdFactor:
        if self._factor is None:
            raise DecompositionError("compute() must succeed before solving")
        return self._factor
