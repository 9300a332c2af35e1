from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ..algebra import build_joltage_system, button_caps
from ..evaluation.metrics import joltage_residual, verify_assignment
from ..integer.bounds import estimate_bounds
from ..integer.classify import build_pivot_map, pivot_expressions, pivot_values
from ..integer.constraints import derive_constraints
from ..integer.elimination import integer_rref
from ..integer.search import minimize
from ..machine import Machine
from .base import Solver, SolverConfig, SolverError

logger = logging.getLogger(__name__)


class JoltageExact(Solver):
    """Fewest presses that drive every joltage counter exactly to its target.

    The joltage equations are reduced with integer Gaussian elimination,
    the remaining free buttons are bounded through the non-negativity of
    the pivot buttons, and the bounded space is searched exhaustively.
    """

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()

    def solve_assignment(
        self, machine: Machine, costs: Sequence[int] | None = None
    ) -> tuple[int, np.ndarray]:
        """Return (minimum cost, presses per button).

        `costs` weighs each button's presses; the default counts every
        press once.
        """
        n = machine.num_buttons
        R = integer_rref(build_joltage_system(machine), n)
        pivots = build_pivot_map(R, n)
        expressions = pivot_expressions(R, pivots)
        cs = derive_constraints(expressions, pivots, costs=costs)
        logger.debug(
            "%r: %d pivots, free %s, scale %d",
            machine,
            len(expressions),
            cs.free,
            cs.scale,
        )

        initial = button_caps(machine) if self.config.seed_caps else None
        bounds = estimate_bounds(cs, passes=self.config.bound_passes, initial=initial)
        result = minimize(cs, bounds, max_assignments=self.config.max_assignments)
        assignment = pivot_values(expressions, result.values)[:n]

        if self.config.verify and not verify_assignment(machine, assignment):
            raise SolverError(
                f"Assignment {assignment.tolist()} misses targets by "
                f"{joltage_residual(machine, assignment).tolist()}"
            )
        logger.debug("%r: %d presses %s", machine, result.objective, assignment.tolist())
        return result.objective, assignment

    def solve(self, machine: Machine) -> int:
        return self.solve_assignment(machine)[0]
