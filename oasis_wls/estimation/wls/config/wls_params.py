################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Structured configuration schema for weighted least squares solvers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from typing import Any


# Decomposition used by compute()
SOLVER_DECOMPOSITION: str = "cholesky"
# Floating point element type of the accumulator
SOLVER_PRECISION: str = "float64"
# Singular value cut-off ratio for the SVD decomposition
SOLVER_SVD_CONDITION: float = 1e9

# Isotropic prior strength applied to new accumulators (None disables)
PRIOR_ISOTROPIC: float | None = None

# Supported decomposition identifiers
DECOMPOSITIONS: frozenset[str] = frozenset({"cholesky", "svd"})
# Supported precision identifiers
PRECISIONS: frozenset[str] = frozenset({"float64", "float32"})


class WlsParamsError(Exception):
    """Raised when WLS parameter validation fails."""


def _require_positive(value: float, name: str) -> None:
    """Require a finite positive value."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise WlsParamsError(f"{name} must be a number")
    if not math.isfinite(value) or value <= 0.0:
        raise WlsParamsError(f"{name} must be positive")


def _validate_optional_positive(value: float | None, name: str) -> None:
    """Validate an optional positive parameter."""
    if value is None:
        return
    _require_positive(value, name)


def _require_choice(value: str, choices: frozenset[str], name: str) -> None:
    """Require a value from a fixed set of identifiers."""
    if not isinstance(value, str) or value not in choices:
        options: str = ", ".join(sorted(choices))
        raise WlsParamsError(f"{name} must be one of {options}")


@dataclass(frozen=True)
class SolverParams:
    """Normal-equations solver configuration."""

    # Decomposition identifier
    decomposition: str = SOLVER_DECOMPOSITION

    # Element type identifier
    precision: str = SOLVER_PRECISION

    # Singular value cut-off ratio for "svd"
    svd_condition: float = SOLVER_SVD_CONDITION


@dataclass(frozen=True)
class PriorParams:
    """Regularization applied when accumulators are created."""

    # Isotropic prior strength, inverse variance of every parameter
    isotropic: float | None = PRIOR_ISOTROPIC


@dataclass(frozen=True)
class WlsParams:
    """Complete configuration tree for WLS solvers."""

    solver: SolverParams
    prior: PriorParams

    @classmethod
    def defaults(cls) -> WlsParams:
        """Return the default WLS parameter tree."""
        return cls(
            solver=SolverParams(),
            prior=PriorParams(),
        )

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        _require_choice(
            self.solver.decomposition, DECOMPOSITIONS, "solver.decomposition"
        )
        _require_choice(self.solver.precision, PRECISIONS, "solver.precision")
        _require_positive(self.solver.svd_condition, "solver.svd_condition")

        _validate_optional_positive(self.prior.isotropic, "prior.isotropic")

    def replace(self, **namespace_overrides: Any) -> WlsParams:
        """Return a modified copy of the parameters."""
        return replace(self, **namespace_overrides)

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict representation for debugging."""
        return _dataclass_to_dict(self)


def _dataclass_to_dict(value: Any) -> Any:
    """Convert dataclasses into plain Python values."""
    if hasattr(value, "__dataclass_fields__"):
        return {
            field.name: _dataclass_to_dict(getattr(value, field.name))
            for field in fields(value)
        }
    return value
