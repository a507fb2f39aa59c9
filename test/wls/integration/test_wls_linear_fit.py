################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""End-to-end linear fits through the WLS accumulator."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray

from oasis_wls.estimation.wls.config.params_yaml import loads_params_yaml
from oasis_wls.estimation.wls.config.wls_config import WlsConfig
from oasis_wls.estimation.wls.solver.combine import merge_all
from oasis_wls.estimation.wls.solver.wls import WLS


# Number of synthetic observations per fit
_NUM_ROWS: int = 200

# Parameters of the synthetic linear model
_X_TRUE: NDArray[np.float64] = np.array([0.5, -1.25, 2.0, 3.5], dtype=np.float64)


def _linear_system(
    seed: int,
    noise_sigma: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    rng: np.random.Generator = np.random.default_rng(seed)
    A: NDArray[np.float64] = rng.normal(size=(_NUM_ROWS, _X_TRUE.shape[0]))
    y: NDArray[np.float64] = A @ _X_TRUE + rng.normal(scale=noise_sigma, size=_NUM_ROWS)
    return A, y


def test_noise_free_rows_recover_parameters() -> None:
    """Unit-weight rows of y = A·x recover x exactly up to rounding."""
    A, y = _linear_system(0, 0.0)
    wls: WLS = WLS(_X_TRUE.shape[0])
    for row, value in zip(A, y):
        wls.add_mJ(value, row)
    wls.compute()
    np.testing.assert_allclose(wls.mu, _X_TRUE, atol=1e-10)


@pytest.mark.parametrize("noise_sigma", [1e-1, 1e-3, 1e-5])
def test_estimate_converges_as_noise_vanishes(noise_sigma: float) -> None:
    """The estimate error shrinks with the measurement noise."""
    A, y = _linear_system(1, noise_sigma)
    wls: WLS = WLS(_X_TRUE.shape[0])
    wls.add_mJ(y, A.T, 1.0 / noise_sigma**2)
    wls.compute()
    error: float = float(np.max(np.abs(wls.mu - _X_TRUE)))
    assert error < 10.0 * noise_sigma


def test_matches_weighted_lstsq() -> None:
    """Weighted accumulation agrees with a direct weighted least squares solve."""
    A, y = _linear_system(2, 0.1)
    rng: np.random.Generator = np.random.default_rng(3)
    weights: NDArray[np.float64] = rng.uniform(0.1, 10.0, size=_NUM_ROWS)

    wls: WLS = WLS(_X_TRUE.shape[0])
    for row, value, weight in zip(A, y, weights):
        wls.add_mJ(value, row, weight)
    wls.compute()

    sqrt_w: NDArray[np.float64] = np.sqrt(weights)
    expected: NDArray[np.float64] = np.linalg.lstsq(
        A * sqrt_w[:, None], y * sqrt_w, rcond=None
    )[0]
    np.testing.assert_allclose(wls.mu, expected, rtol=1e-8, atol=1e-10)


def test_prior_shrinks_towards_zero() -> None:
    """A strong prior pulls the estimate towards zero, a weak one does not."""
    A, y = _linear_system(4, 0.0)

    weak: WLS = WLS(_X_TRUE.shape[0])
    weak.add_prior(1e-9)
    weak.add_mJ(y, A.T, 1.0)
    weak.compute()
    np.testing.assert_allclose(weak.mu, _X_TRUE, atol=1e-8)

    strong: WLS = WLS(_X_TRUE.shape[0])
    strong.add_prior(1e6)
    strong.add_mJ(y, A.T, 1.0)
    strong.compute()
    assert float(np.linalg.norm(strong.mu)) < 0.1 * float(np.linalg.norm(_X_TRUE))


def test_partitioned_fit_from_yaml_config() -> None:
    """Per-worker accumulators built from YAML config merge into one fit."""
    config: WlsConfig = WlsConfig(
        loads_params_yaml("solver:\n  decomposition: cholesky\nprior:\n  isotropic: 1.0e-12\n")
    )
    A, y = _linear_system(5, 0.0)

    workers: list[WLS] = []
    for rows in np.array_split(np.arange(_NUM_ROWS), 4):
        worker: WLS = WLS(_X_TRUE.shape[0])
        worker.add_mJ(y[rows], A[rows].T, 1.0)
        workers.append(worker)

    combined: WLS = config.create(_X_TRUE.shape[0])
    combined += merge_all(workers)
    combined.compute()
    np.testing.assert_allclose(combined.mu, _X_TRUE, atol=1e-9)


def test_svd_fit_handles_unobservable_parameter() -> None:
    """An SVD-configured solve leaves unobserved parameters at zero."""
    config: WlsConfig = WlsConfig(loads_params_yaml("solver:\n  decomposition: svd\n"))
    A, y = _linear_system(6, 0.0)
    A[:, 3] = 0.0
    y = A @ _X_TRUE

    wls: WLS = config.create(_X_TRUE.shape[0])
    wls.add_mJ(y, A.T, 1.0)
    wls.compute()
    np.testing.assert_allclose(wls.mu[:3], _X_TRUE[:3], atol=1e-9)
    assert abs(float(wls.mu[3])) < 1e-9
