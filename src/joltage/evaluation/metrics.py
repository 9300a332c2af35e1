from __future__ import annotations

from typing import Iterable

import numpy as np

from ..algebra import build_toggle_matrix
from ..machine import Machine


def joltage_residual(machine: Machine, assignment) -> np.ndarray:
    # A x - b over the original, un-eliminated equations
    A = build_toggle_matrix(machine)
    x = np.asarray(assignment, dtype=np.int64)
    return A @ x - np.asarray(machine.joltages, dtype=np.int64)


def verify_assignment(machine: Machine, assignment) -> bool:
    x = np.asarray(assignment, dtype=np.int64)
    return bool(np.all(x >= 0) and not np.any(joltage_residual(machine, x)))


def lights_after(machine: Machine, presses: Iterable[int]) -> int:
    state = 0
    for j in presses:
        state ^= machine.buttons[j]
    return state


def total_presses(results) -> int:
    return sum(int(r.presses) for r in results)
