from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from .constraints import ConstraintSet
from .errors import NoFeasibleAssignmentError, UnboundedVariableError

logger = logging.getLogger(__name__)

# (low, high); high is None while no upper bound is known
Bounds = Dict[int, Tuple[int, Optional[int]]]


def _add(a: Optional[int], b: Optional[int]) -> Optional[int]:
    # None saturates: anything plus an unbounded term is unbounded
    if a is None or b is None:
        return None
    return a + b


def _mul(coeff: int, value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    return coeff * value


def _tighten_once(cs: ConstraintSet, bounds: Bounds) -> bool:
    changed = False
    for constraint in cs.non_negative():
        coeffs = constraint.coefficients
        constant = int(coeffs[-1])
        for var in cs.free:
            coeff = int(coeffs[var])
            if coeff == 0:
                continue

            # constant + coeff * x_var + sum_others >= 0
            max_others: Optional[int] = constant
            for other in cs.free:
                if other == var:
                    continue
                other_coeff = int(coeffs[other])
                low, high = bounds[other]
                if other_coeff > 0:
                    max_others = _add(max_others, _mul(other_coeff, high))
                elif other_coeff < 0:
                    max_others = _add(max_others, other_coeff * low)
            if max_others is None:
                continue

            low, high = bounds[var]
            if coeff > 0:
                # x_var >= ceil(-max_others / coeff)
                lower = max(-(max_others // coeff), 0)
                if lower > low:
                    bounds[var] = (lower, high)
                    changed = True
            else:
                # x_var <= floor(max_others / -coeff)
                upper = max_others // -coeff
                if high is None or upper < high:
                    bounds[var] = (low, upper)
                    changed = True
    return changed


def estimate_bounds(
    cs: ConstraintSet, passes: int = 1, initial: Optional[Bounds] = None
) -> Dict[int, Tuple[int, int]]:
    """Return an inclusive [low, high] search range for every free variable.

    Each NonNegative constraint is read as a one-sided bound on one free
    variable, with the other free variables at whichever known extreme
    loosens it most. Ranges are intersected in place, so later constraints
    see tighter ranges; `passes` repeats the sweep until nothing changes.
    `initial` seeds known ranges (e.g. caps read off the original
    equations); free variables missing from it start at [0, unbounded].
    """
    bounds: Bounds = {var: (0, None) for var in cs.free}
    for var, (low, high) in (initial or {}).items():
        if var in bounds:
            bounds[var] = (max(low, 0), high)
    for _ in range(max(passes, 1)):
        if not _tighten_once(cs, bounds):
            break

    mentioned = {
        var
        for c in cs.non_negative()
        for var in cs.free
        if c.coefficients[var] != 0
    }
    result: Dict[int, Tuple[int, int]] = {}
    for var, (low, high) in bounds.items():
        if high is None:
            if var not in mentioned and cs.objective[var] >= 0:
                # nothing but the objective sees it; its lowest value is best
                high = low
            else:
                raise UnboundedVariableError(
                    f"x{var} has no finite upper bound after {passes} pass(es)"
                )
        if low > high:
            raise NoFeasibleAssignmentError(f"x{var} has empty range [{low}, {high}]")
        result[var] = (low, high)
    logger.debug("bounds: %s", result)
    return result
