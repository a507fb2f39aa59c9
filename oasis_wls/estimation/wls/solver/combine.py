################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Partitioned accumulation and merging of WLS accumulators."""

from __future__ import annotations

import logging
from typing import Any
from typing import Callable
from typing import Iterable
from typing import Sequence

from oasis_wls.estimation.wls.solver.wls import WLS


_LOG: logging.Logger = logging.getLogger(__name__)

# A measurement as passed to WLS.add_mJ: (m, J, weight)
Measurement = tuple[Any, Any, Any]


def merge_all(accumulators: Iterable[WLS]) -> WLS:
    """
    Fold accumulators into a new one

    The result has the class, size, precision and decomposition of the first
    accumulator. The inputs are not modified.
    """
    iterator = iter(accumulators)
    try:
        first: WLS = next(iterator)
    except StopIteration:
        raise ValueError("merge_all requires at least one accumulator") from None

    combined: WLS = first.copy()
    count: int = 1
    for accumulator in iterator:
        combined += accumulator
        count += 1

    _LOG.debug("Merged %d accumulators of size %d", count, combined.size)
    return combined


def accumulate(wls: WLS, measurements: Iterable[Measurement]) -> WLS:
    """Fold a sequence of (m, J, weight) measurements into an accumulator."""
    for m, J, weight in measurements:
        wls.add_mJ(m, J, weight)
    return wls


def accumulate_partitions(
    size: int,
    partitions: Sequence[Iterable[Measurement]],
    *,
    factory: Callable[[int], WLS] = WLS,
) -> WLS:
    """
    Accumulate each partition into its own WLS and merge the results

    Each partition is independent, so the per-partition step may be run by
    separate workers. The merge happens here, sequentially.
    """
    if not partitions:
        return factory(size)
    parts: list[WLS] = [accumulate(factory(size), part) for part in partitions]
    return merge_all(parts)
