################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Incremental weighted least squares in information form."""

from __future__ import annotations

from oasis_wls.estimation.wls.config.wls_config import WlsConfig
from oasis_wls.estimation.wls.config.wls_config import WlsConfigError
from oasis_wls.estimation.wls.config.wls_params import WlsParams
from oasis_wls.estimation.wls.config.wls_params import WlsParamsError
from oasis_wls.estimation.wls.math_utils.validation import DimensionMismatchError
from oasis_wls.estimation.wls.solver.combine import accumulate_partitions
from oasis_wls.estimation.wls.solver.combine import merge_all
from oasis_wls.estimation.wls.solver.decomposition import SQSVD
from oasis_wls.estimation.wls.solver.decomposition import Cholesky
from oasis_wls.estimation.wls.solver.decomposition import Decomposition
from oasis_wls.estimation.wls.solver.decomposition import DecompositionError
from oasis_wls.estimation.wls.solver.decomposition import NotPositiveDefiniteError
from oasis_wls.estimation.wls.solver.wls import WLS
from oasis_wls.estimation.wls.solver.wls import WlsState


__all__ = [
    "Cholesky",
    "Decomposition",
    "DecompositionError",
    "DimensionMismatchError",
    "NotPositiveDefiniteError",
    "SQSVD",
    "WLS",
    "WlsConfig",
    "WlsConfigError",
    "WlsParams",
    "WlsParamsError",
    "WlsState",
    "accumulate_partitions",
    "merge_all",
]
