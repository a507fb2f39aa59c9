################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for WLS parameter schema."""

from __future__ import annotations

from typing import Any

import pytest

from oasis_wls.estimation.wls.config.wls_params import PriorParams
from oasis_wls.estimation.wls.config.wls_params import SolverParams
from oasis_wls.estimation.wls.config.wls_params import WlsParams
from oasis_wls.estimation.wls.config.wls_params import WlsParamsError


def test_defaults_validate() -> None:
    """Defaults should validate successfully."""
    params: WlsParams = WlsParams.defaults()
    params.validate()
    assert params.solver.decomposition == "cholesky"
    assert params.solver.precision == "float64"
    assert params.prior.isotropic is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"solver": SolverParams(decomposition="qr")},
        {"solver": SolverParams(precision="float16")},
        {"solver": SolverParams(svd_condition=0.0)},
        {"solver": SolverParams(svd_condition=float("inf"))},
        {"prior": PriorParams(isotropic=-1.0)},
        {"prior": PriorParams(isotropic=0.0)},
    ],
)
def test_invalid_values_raise(overrides: dict[str, Any]) -> None:
    """Out-of-range parameters fail validation."""
    params: WlsParams = WlsParams.defaults().replace(**overrides)
    with pytest.raises(WlsParamsError):
        params.validate()


def test_nested_dict() -> None:
    """as_nested_dict mirrors the parameter tree."""
    params: WlsParams = WlsParams.defaults().replace(
        prior=PriorParams(isotropic=0.5),
    )
    assert params.as_nested_dict() == {
        "solver": {
            "decomposition": "cholesky",
            "precision": "float64",
            "svd_condition": 1e9,
        },
        "prior": {"isotropic": 0.5},
    }
