################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for WLS parameter YAML loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from oasis_wls.estimation.wls.config.params_yaml import dumps_params_yaml
from oasis_wls.estimation.wls.config.params_yaml import load_params_yaml
from oasis_wls.estimation.wls.config.params_yaml import loads_params_yaml
from oasis_wls.estimation.wls.config.params_yaml import params_from_mapping
from oasis_wls.estimation.wls.config.wls_params import PriorParams
from oasis_wls.estimation.wls.config.wls_params import WlsParams
from oasis_wls.estimation.wls.config.wls_params import WlsParamsError


def test_loads_full_document() -> None:
    """All namespaces are read from YAML."""
    text: str = (
        "solver:\n"
        "  decomposition: svd\n"
        "  precision: float32\n"
        "  svd_condition: 1e6\n"
        "prior:\n"
        "  isotropic: 0.25\n"
    )
    params: WlsParams = loads_params_yaml(text)
    assert params.solver.decomposition == "svd"
    assert params.solver.precision == "float32"
    assert params.solver.svd_condition == 1e6
    assert params.prior.isotropic == 0.25


def test_missing_sections_use_defaults() -> None:
    """Empty or partial documents fall back to defaults."""
    assert loads_params_yaml("") == WlsParams.defaults()
    params: WlsParams = params_from_mapping({"prior": {"isotropic": 1}})
    assert params.solver == WlsParams.defaults().solver
    assert params.prior.isotropic == 1.0


@pytest.mark.parametrize(
    "data",
    [
        {"solver": {"pivoting": True}},
        {"regularization": {}},
        {"solver": []},
        {"solver": {"svd_condition": "large"}},
        {"prior": {"isotropic": True}},
        {"solver": {"decomposition": "qr"}},
    ],
)
def test_invalid_mappings_raise(data: dict[str, object]) -> None:
    """Unknown keys, wrong types and invalid values are rejected."""
    with pytest.raises(WlsParamsError):
        params_from_mapping(data)


def test_invalid_yaml_raises() -> None:
    """Malformed YAML is reported as a parameter error."""
    with pytest.raises(WlsParamsError):
        loads_params_yaml("solver: [unterminated")
    with pytest.raises(WlsParamsError):
        loads_params_yaml("- a\n- b\n")


def test_dump_and_load_file(tmp_path: Path) -> None:
    """Dumped parameters load back from disk unchanged."""
    params: WlsParams = WlsParams.defaults().replace(
        prior=PriorParams(isotropic=0.125),
    )
    path: Path = tmp_path / "wls.yaml"
    path.write_text(dumps_params_yaml(params), encoding="utf-8")
    assert load_params_yaml(path) == params


def test_missing_file_raises(tmp_path: Path) -> None:
    """Unreadable files raise WlsParamsError."""
    with pytest.raises(WlsParamsError):
        load_params_yaml(tmp_path / "missing.yaml")
