from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from .classify import PivotExpression, PivotMap


@dataclass(frozen=True)
class NonNegative:
    """coefficients @ [x..., 1] >= 0"""

    coefficients: np.ndarray

    def is_satisfied(self, values: np.ndarray) -> bool:
        return int(self.coefficients @ values) >= 0


@dataclass(frozen=True)
class DivisibleBy:
    """coefficients @ [x..., 1] == 0 (mod divisor)"""

    coefficients: np.ndarray
    divisor: int

    def is_satisfied(self, values: np.ndarray) -> bool:
        return int(self.coefficients @ values) % self.divisor == 0


Constraint = Union[NonNegative, DivisibleBy]


@dataclass(frozen=True)
class StackedConstraints:
    """All constraints of a set as two integer matrices, checked at once."""

    non_negative: np.ndarray  # (k, n + 1)
    divisible: np.ndarray  # (m, n + 1)
    divisors: np.ndarray  # (m,)

    def accepts(self, values: np.ndarray) -> bool:
        if not (self.non_negative @ values >= 0).all():
            return False
        return bool(((self.divisible @ values) % self.divisors == 0).all())


@dataclass(frozen=True)
class ConstraintSet:
    constraints: list[Constraint]
    objective: np.ndarray  # scaled objective, length n + 1
    scale: int
    free: list[int]

    @property
    def num_variables(self) -> int:
        return len(self.objective) - 1

    def non_negative(self) -> list[NonNegative]:
        return [c for c in self.constraints if isinstance(c, NonNegative)]

    def is_satisfied(self, values: np.ndarray) -> bool:
        return all(c.is_satisfied(values) for c in self.constraints)

    def objective_value(self, values: np.ndarray) -> int:
        return int(self.objective @ values) // self.scale

    def stacked(self) -> StackedConstraints:
        width = self.num_variables + 1
        divisible = [c for c in self.constraints if isinstance(c, DivisibleBy)]
        return StackedConstraints(
            np.array(
                [c.coefficients for c in self.non_negative()], dtype=np.int64
            ).reshape(-1, width),
            np.array(
                [c.coefficients for c in divisible], dtype=np.int64
            ).reshape(-1, width),
            np.array([c.divisor for c in divisible], dtype=np.int64),
        )


def derive_constraints(
    expressions: Sequence[PivotExpression],
    pivots: PivotMap,
    costs: Sequence[int] | None = None,
) -> ConstraintSet:
    """Build the constraints every free-variable assignment must satisfy.

    Each pivot variable must come out non-negative, and integral when its
    coefficient is not 1. The objective sum(costs[j] * x[j]) is kept in
    units of `scale` (the lcm of all pivot coefficients) so it stays an
    integer vector; the final DivisibleBy brings it back to true units.
    """
    n = pivots.num_variables
    free = pivots.free_variables
    if costs is None:
        costs = [1] * n
    if len(costs) != n:
        raise ValueError(f"Expected {n} button costs, got {len(costs)}")
    if any(c < 0 for c in costs):
        raise ValueError("Button costs must be non-negative")

    scale = 1
    for pe in expressions:
        scale = math.lcm(scale, pe.coefficient)

    constraints: list[Constraint] = []
    objective = np.zeros(n + 1, dtype=np.int64)
    for f in free:
        objective[f] = scale * costs[f]
    for pe in expressions:
        expr = np.array(pe.expression, dtype=np.int64)
        expr.setflags(write=False)
        constraints.append(NonNegative(expr))
        if pe.coefficient != 1:
            constraints.append(DivisibleBy(expr, pe.coefficient))
        objective += costs[pe.column] * (scale // pe.coefficient) * expr

    if scale > 1:
        constraints.append(DivisibleBy(objective.copy(), scale))
    objective.setflags(write=False)
    return ConstraintSet(constraints, objective, scale, free)
