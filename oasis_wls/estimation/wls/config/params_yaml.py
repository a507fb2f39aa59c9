################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""YAML loading and dumping for WLS parameters."""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Any
from typing import Mapping

import yaml

from oasis_wls.estimation.wls.config.wls_params import PriorParams
from oasis_wls.estimation.wls.config.wls_params import SolverParams
from oasis_wls.estimation.wls.config.wls_params import WlsParams
from oasis_wls.estimation.wls.config.wls_params import WlsParamsError


# Fields that hold floating point values
_FLOAT_FIELDS: frozenset[str] = frozenset({"svd_condition", "isotropic"})


def _as_float(value: Any, name: str) -> float | None:
    """Coerce a YAML scalar to float."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise WlsParamsError(f"{name} must be a number")
    # PyYAML reads exponents without a decimal point, e.g. 1e9, as strings
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise WlsParamsError(f"{name} must be a number") from exc


def _namespace(
    data: Mapping[str, Any],
    key: str,
    cls: type[Any],
) -> Any:
    section: Any = data.get(key, {})
    if section is None:
        section = {}
    if not isinstance(section, Mapping):
        raise WlsParamsError(f"{key} must be a mapping")

    known: set[str] = {field.name for field in fields(cls)}
    unknown: set[str] = set(section) - known
    if unknown:
        raise WlsParamsError(f"Unknown {key} keys: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    for name, value in section.items():
        if name in _FLOAT_FIELDS:
            values[name] = _as_float(value, f"{key}.{name}")
        else:
            values[name] = value
    return cls(**values)


def params_from_mapping(data: Mapping[str, Any] | None) -> WlsParams:
    """Build and validate WLS parameters from a nested mapping."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise WlsParamsError("WLS parameters must be a mapping")

    unknown: set[str] = set(data) - {"solver", "prior"}
    if unknown:
        raise WlsParamsError(f"Unknown keys: {', '.join(sorted(unknown))}")

    params: WlsParams = WlsParams(
        solver=_namespace(data, "solver", SolverParams),
        prior=_namespace(data, "prior", PriorParams),
    )
    params.validate()
    return params


def loads_params_yaml(text: str) -> WlsParams:
    """Parse WLS parameters from YAML text."""
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WlsParamsError("Invalid YAML") from exc
    return params_from_mapping(data)


def dumps_params_yaml(params: WlsParams) -> str:
    """Serialize WLS parameters to YAML text."""
    return str(yaml.safe_dump(params.as_nested_dict(), sort_keys=False))


def load_params_yaml(path: str | os.PathLike[str]) -> WlsParams:
    """Load WLS parameters from a YAML file."""
    path_obj: Path = Path(os.fspath(path))
    try:
        text: str = path_obj.read_text(encoding="utf-8")
    except OSError as exc:
        raise WlsParamsError(f"Failed to read {path_obj}") from exc
    return loads_params_yaml(text)
