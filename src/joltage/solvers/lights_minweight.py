from __future__ import annotations

import numpy as np

from ..algebra import build_toggle_matrix, gf2_min_weight_solution, lights_vector
from ..evaluation.metrics import lights_after
from ..machine import Machine
from .base import NoPlanError, Solver, SolverConfig, SolverError


class LightsMinWeight(Solver):
    """Fewest presses that turn all-off indicator lights into the target pattern."""

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()

    def plan(self, machine: Machine) -> list[int]:
        A = build_toggle_matrix(machine)
        target = lights_vector(machine)
        solution, is_valid = gf2_min_weight_solution(
            A, target, max_candidates=self.config.max_assignments
        )
        if not is_valid or solution is None:
            raise NoPlanError(f"No button combination lights {machine}")
        presses = [int(j) for j in np.flatnonzero(solution)]
        if self.config.verify and lights_after(machine, presses) != machine.lights:
            raise SolverError(f"Plan {presses} does not light {machine}")
        return presses

    def solve(self, machine: Machine) -> int:
        return len(self.plan(machine))
