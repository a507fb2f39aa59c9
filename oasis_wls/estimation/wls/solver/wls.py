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
Incremental weighted least squares in information form.

The accumulator keeps the normal-equations pair

    C_inv = Σ Jᵢ Wᵢ Jᵢᵀ + priors      (n x n information matrix)
    vector = Σ Jᵢ Wᵢ mᵢ                (n)

and solves C_inv · mu = vector on demand. Information is additive across
independent measurements and priors, so every update and the merge of two
accumulators is a plain in-place sum. Only compute() pays for a
factorization.

Lifecycle:

    construct/clear -> add_prior/add_mJ/merge (any order, any count)
                    -> compute() -> mu
                    -> further updates leave mu stale until compute()

Inputs are validated before any mutation, so a DimensionMismatchError
leaves the statistics untouched. Factorization errors from the
decomposition propagate unchanged out of compute().

Not thread safe. Accumulate per worker and merge on a single thread.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any
from typing import ClassVar
from typing import Optional

import numpy as np
from numpy.typing import DTypeLike
from numpy.typing import NDArray

from oasis_wls.estimation.wls.math_utils.linalg import Linalg
from oasis_wls.estimation.wls.math_utils.validation import DimensionMismatchError
from oasis_wls.estimation.wls.math_utils.validation import as_matrix
from oasis_wls.estimation.wls.math_utils.validation import as_scalar
from oasis_wls.estimation.wls.math_utils.validation import as_vector
from oasis_wls.estimation.wls.math_utils.validation import require_size
from oasis_wls.estimation.wls.math_utils.validation import resolve_precision
from oasis_wls.estimation.wls.solver.decomposition import Cholesky
from oasis_wls.estimation.wls.solver.decomposition import Decomposition
from oasis_wls.estimation.wls.solver.decomposition import DecompositionFactory


_LOG: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WlsState:
    """
    Read-only views of an accumulator's statistics

    Fields:
        C_inv: Information matrix, shape (n, n)
        vector: Weighted measurement vector, shape (n,)
        mu: Last solution of the normal equations, shape (n,)
        solved: True when mu reflects the current statistics
    """

    C_inv: NDArray[Any]
    vector: NDArray[Any]
    mu: NDArray[Any]
    solved: bool


def _readonly(array: NDArray[Any]) -> NDArray[Any]:
    view: NDArray[Any] = array.view()
    view.flags.writeable = False
    return view


@functools.lru_cache(maxsize=None)
def _fixed_class(base: type[WLS], size: int) -> type[WLS]:
    return type(f"{base.__name__}{size}", (base,), {"SIZE": size})


class WLS:
    """
    Weighted least squares accumulator over n parameters

    A fixed-size variant is obtained with WLS.fixed(n). Its constructor
    size is optional and must match n when given.

    Args:
        size: Number of parameters n
        decomposition: Factory called as decomposition(n, dtype) to build the
            solver used by compute(). Defaults to Cholesky.
        precision: Floating point element type, float64 or float32
    """

    # Compile-time dimension of fixed-size variants, None when dynamic
    SIZE: ClassVar[Optional[int]] = None

    def __init__(
        self,
        size: Optional[int] = None,
        *,
        decomposition: DecompositionFactory = Cholesky,
        precision: DTypeLike = np.float64,
    ) -> None:
        n: int = type(self)._resolve_size(size)
        dtype: np.dtype[Any] = resolve_precision(precision)

        self._size: int = n
        self._dtype: np.dtype[Any] = dtype
        self._decomposition_factory: DecompositionFactory = decomposition
        self._decomposition: Decomposition = decomposition(n, dtype)
        self._C_inv: NDArray[Any] = np.zeros((n, n), dtype=dtype)
        self._vector: NDArray[Any] = np.zeros(n, dtype=dtype)
        self._mu: NDArray[Any] = np.zeros(n, dtype=dtype)
        self._solved: bool = False

        self.clear()

        _LOG.debug(
            "Created %s with %d parameters (%s)",
            type(self).__name__,
            n,
            dtype.name,
        )

    @classmethod
    def fixed(cls, size: int) -> type[WLS]:
        """
        Return the subclass whose dimension is fixed to size

        Repeated calls with the same size return the same class.
        """
        n: int = require_size(size, "size")
        if cls.SIZE is not None:
            if cls.SIZE != n:
                raise DimensionMismatchError(
                    f"{cls.__name__} is already fixed to {cls.SIZE}"
                )
            return cls
        return _fixed_class(cls, n)

    @classmethod
    def _resolve_size(cls, size: Optional[int]) -> int:
        if cls.SIZE is None:
            if size is None:
                raise TypeError(f"{cls.__name__} requires a size")
            return require_size(size, "size")
        if size is not None and require_size(size, "size") != cls.SIZE:
            raise DimensionMismatchError(
                f"{cls.__name__} has fixed size {cls.SIZE}, got {size}"
            )
        return cls.SIZE

    @property
    def size(self) -> int:
        return self._size

    @property
    def precision(self) -> np.dtype[Any]:
        return self._dtype

    @property
    def C_inv(self) -> NDArray[Any]:
        """Information matrix, mutable in place."""
        return self._C_inv

    @property
    def vector(self) -> NDArray[Any]:
        """Weighted measurement vector, mutable in place."""
        return self._vector

    @property
    def mu(self) -> NDArray[Any]:
        """Result of the last compute(), stale after further updates."""
        return self._mu

    @property
    def decomposition(self) -> Decomposition:
        return self._decomposition

    @property
    def solved(self) -> bool:
        return self._solved

    def state(self) -> WlsState:
        """Return read-only views of the current statistics."""
        return WlsState(
            C_inv=_readonly(self._C_inv),
            vector=_readonly(self._vector),
            mu=_readonly(self._mu),
            solved=self._solved,
        )

    def clear(self) -> None:
        """Discard all measurements and priors."""
        self._C_inv.fill(0.0)
        self._vector.fill(0.0)
        self._solved = False

    def add_prior(self, prior: Any) -> None:
        """
        Add a zero-mean Gaussian prior on the parameters

        The prior is dispatched on its dimensionality:

            scalar val      C_inv[i, i] += val         σ² = 1 / val
            vector v (n)    C_inv[i, i] += v[i]        σᵢ² = 1 / v[i]
            matrix m (n x n) C_inv += m                 full prior information

        A matrix prior is expected to be symmetric positive semi-definite and
        is not checked.
        """
        ndim: int = int(np.ndim(prior))
        if ndim == 0:
            val: float = as_scalar(prior, "prior", self._dtype)
            Linalg.add_to_diagonal(self._C_inv, val)
        elif ndim == 1:
            v: NDArray[Any] = as_vector(prior, self._size, "prior", self._dtype)
            Linalg.add_to_diagonal(self._C_inv, v)
        elif ndim == 2:
            m: NDArray[Any] = as_matrix(
                prior, (self._size, self._size), "prior", self._dtype
            )
            self._C_inv += m
        else:
            raise DimensionMismatchError(f"prior must have at most 2 dimensions, got {ndim}")
        self._solved = False

    def add_mJ(self, m: Any, J: Any, weight: Any = 1.0) -> None:
        """
        Add one measurement or a batch of jointly observed measurements

        A scalar m is a single measurement: J has shape (n,) and weight is
        its inverse variance. A vector m of length k is a batch: J has shape
        (n, k) and weight is the (k, k) inverse covariance of m. A scalar
        weight for a batch is taken as weight * I.
        """
        if np.ndim(m) == 0:
            self.add_measurement(m, J, weight)
            return

        invcov: Any = weight
        if np.ndim(weight) == 0:
            k: int = int(np.shape(m)[0])
            invcov = np.eye(k, dtype=self._dtype) * as_scalar(weight, "weight")
        self.add_measurements(m, J, invcov)

    def add_measurement(self, m: Any, J: Any, weight: Any = 1.0) -> None:
        """Add a scalar measurement m with Jacobian J and inverse variance weight."""
        m_val: float = as_scalar(m, "m", self._dtype)
        w_val: float = as_scalar(weight, "weight", self._dtype)
        J_vec: NDArray[Any] = as_vector(J, self._size, "J", self._dtype)

        Jw: NDArray[Any] = J_vec * w_val
        self._C_inv += np.outer(Jw, J_vec)
        self._vector += m_val * Jw
        self._solved = False

    def add_measurements(self, m: Any, J: Any, invcov: Any) -> None:
        """Add k measurements m with Jacobian J (n x k) and inverse covariance (k x k)."""
        m_vec: NDArray[Any] = np.asarray(m, dtype=self._dtype)
        if m_vec.ndim != 1:
            raise DimensionMismatchError(f"m must be a vector, got {m_vec.shape}")
        k: int = int(m_vec.shape[0])
        J_mat: NDArray[Any] = as_matrix(J, (self._size, k), "J", self._dtype)
        invcov_mat: NDArray[Any] = as_matrix(invcov, (k, k), "invcov", self._dtype)

        temp: NDArray[Any] = J_mat @ invcov_mat
        self._C_inv += temp @ J_mat.T
        self._vector += temp @ m_vec
        self._solved = False

    def merge(self, other: WLS) -> None:
        """Add another accumulator's statistics to this one."""
        if not isinstance(other, WLS):
            raise TypeError(f"Cannot merge {type(other).__name__} into WLS")
        if other.size != self._size:
            raise DimensionMismatchError(
                f"Cannot merge WLS of size {other.size} into size {self._size}"
            )
        self._C_inv += other.C_inv
        self._vector += other.vector
        self._solved = False

        _LOG.debug("Merged %d-parameter accumulator", self._size)

    def __iadd__(self, other: WLS) -> WLS:
        self.merge(other)
        return self

    def compute(self) -> None:
        """
        Solve the normal equations and store the result in mu

        Errors raised by the decomposition, for example
        NotPositiveDefiniteError on a singular information matrix, are
        propagated and leave mu unchanged.
        """
        try:
            self._decomposition.compute(self._C_inv)
            mu: NDArray[Any] = self._decomposition.backsub(self._vector)
        except Exception as exc:
            _LOG.info("WLS solve failed for %d parameters: %s", self._size, exc)
            raise

        self._mu = np.asarray(mu, dtype=self._dtype)
        self._solved = True

        _LOG.debug("Solved %d-parameter normal equations", self._size)

    def covariance(self) -> NDArray[Any]:
        """Return the covariance of mu from the last computed factorization."""
        return np.asarray(self._decomposition.get_inverse(), dtype=self._dtype)

    def copy(self) -> WLS:
        """Return an independent accumulator with the same statistics."""
        other: WLS = type(self)(
            self._size,
            decomposition=self._decomposition_factory,
            precision=self._dtype,
        )
        other._C_inv[...] = self._C_inv
        other._vector[...] = self._vector
        other._mu = self._mu.copy()
        other._solved = self._solved
        return other

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self._size}, "
            f"precision={self._dtype.name}, solved={self._solved})"
        )
