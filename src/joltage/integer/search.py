from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .constraints import ConstraintSet
from .errors import NoFeasibleAssignmentError, SearchLimitExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    objective: int
    values: np.ndarray  # free variables as chosen, pivots still 0; last entry 1
    visited: int


def _ordered_range(low: int, high: int, coeff: int) -> range:
    # smaller objective first: ascending for coeff >= 0, descending otherwise
    if coeff < 0:
        return range(high, low - 1, -1)
    return range(low, high + 1)


def search_size(bounds: Dict[int, Tuple[int, int]]) -> int:
    return math.prod(high - low + 1 for low, high in bounds.values())


def minimize(
    cs: ConstraintSet,
    bounds: Dict[int, Tuple[int, int]],
    max_assignments: Optional[int] = None,
) -> SearchResult:
    """Enumerate every free-variable assignment inside `bounds` and return
    the feasible one with the smallest objective."""
    size = search_size(bounds)
    if max_assignments is not None and size > max_assignments:
        raise SearchLimitExceeded(
            f"{size} assignments over {len(bounds)} free variables "
            f"exceeds cap {max_assignments}"
        )

    free = list(cs.free)
    n = cs.num_variables
    ranges = [
        _ordered_range(*bounds[var], int(cs.objective[var])) for var in free
    ]

    checker = cs.stacked()

    values = np.zeros(n + 1, dtype=np.int64)
    values[n] = 1
    free_idx = np.array(free, dtype=np.int64)

    best: Optional[int] = None
    best_values: Optional[np.ndarray] = None
    visited = 0
    for combo in itertools.product(*ranges):
        visited += 1
        values[free_idx] = combo
        if not checker.accepts(values):
            continue
        total = cs.objective_value(values)
        if best is None or total < best:
            best = total
            best_values = values.copy()

    if best is None or best_values is None:
        raise NoFeasibleAssignmentError(
            f"No feasible assignment among {visited} candidates"
        )
    logger.debug("search visited %d assignments, best %d", visited, best)
    return SearchResult(best, best_values, visited)
