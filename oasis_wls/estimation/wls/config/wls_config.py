################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""High-level configuration wrapper for WLS solvers."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any

import numpy as np

from oasis_wls.estimation.wls.config.wls_params import WlsParams
from oasis_wls.estimation.wls.config.wls_params import WlsParamsError
from oasis_wls.estimation.wls.solver.decomposition import SQSVD
from oasis_wls.estimation.wls.solver.decomposition import Cholesky
from oasis_wls.estimation.wls.solver.decomposition import DecompositionFactory
from oasis_wls.estimation.wls.solver.wls import WLS


class WlsConfigError(Exception):
    """Raised when WLS configuration validation fails."""


@dataclass(frozen=True)
class WlsConfig:
    """Convenience wrapper around WLS parameters."""

    params: WlsParams

    def __init__(self, params: WlsParams | None = None) -> None:
        """Initialize the configuration wrapper and validate."""
        object.__setattr__(
            self, "params", params if params is not None else WlsParams.defaults()
        )
        self.validate()

    def validate(self) -> None:
        """Validate parameter invariants."""
        try:
            self.params.validate()
        except WlsParamsError as exc:
            raise WlsConfigError(str(exc)) from exc

    def precision(self) -> np.dtype[Any]:
        """Return the configured accumulator element type."""
        return np.dtype(self.params.solver.precision)

    def decomposition_factory(self) -> DecompositionFactory:
        """Return the factory for the configured decomposition."""
        if self.params.solver.decomposition == "svd":
            return functools.partial(
                SQSVD, condition=self.params.solver.svd_condition
            )
        return Cholesky

    def create(self, size: int) -> WLS:
        """Return a new dynamic-size accumulator with the configured prior."""
        return self._with_prior(
            WLS(
                size,
                decomposition=self.decomposition_factory(),
                precision=self.precision(),
            )
        )

    def create_fixed(self, size: int) -> WLS:
        """Return a new accumulator of a fixed-size WLS class."""
        fixed_cls: type[WLS] = WLS.fixed(size)
        return self._with_prior(
            fixed_cls(
                decomposition=self.decomposition_factory(),
                precision=self.precision(),
            )
        )

    def _with_prior(self, wls: WLS) -> WLS:
        if self.params.prior.isotropic is not None:
            wls.add_prior(self.params.prior.isotropic)
        return wls
