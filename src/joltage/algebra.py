from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from .integer.errors import SearchLimitExceeded
from .machine import Machine


def build_toggle_matrix(machine: Machine) -> np.ndarray:
    """Return the (positions x buttons) effect matrix of a machine.
    Column j encodes the positions touched when pressing button j.
    """
    A = np.zeros((machine.num_positions, machine.num_buttons), dtype=np.int64)
    for j in range(machine.num_buttons):
        for i in machine.button_positions(j):
            A[i, j] = 1
    return A


def build_joltage_system(machine: Machine) -> np.ndarray:
    """Return the augmented integer matrix [A | b] for the joltage targets.

    One row per position: coefficient 1 for each button reaching that
    position, right-hand side the position's joltage target.
    """
    A = build_toggle_matrix(machine)
    b = np.asarray(machine.joltages, dtype=np.int64).reshape(-1, 1)
    return np.concatenate([A, b], axis=1)


def button_caps(machine: Machine) -> dict[int, tuple[int, int]]:
    """Press range of each button read off the original equations.

    Every coefficient is 0 or 1 and every press count non-negative, so a
    button can never be pressed more often than the smallest target among
    the positions it reaches. Buttons reaching nothing are left out.
    """
    caps = {}
    for j in range(machine.num_buttons):
        positions = machine.button_positions(j)
        if positions:
            caps[j] = (0, min(machine.joltages[i] for i in positions))
    return caps


def lights_vector(machine: Machine) -> np.ndarray:
    return np.array(
        [(machine.lights >> i) & 1 for i in range(machine.num_positions)],
        dtype=np.uint8,
    )


def gf2_rref_augmented(
    A: np.ndarray, b: np.ndarray
) -> Tuple[np.ndarray, list[int]]:
    """Return RREF of augmented matrix [A|b] over GF(2) and list of pivot columns."""
    A = (A % 2).astype(np.uint8)
    b = (b % 2).astype(np.uint8).reshape(-1, 1)
    m, n = A.shape
    M = np.concatenate([A, b], axis=1)

    row = 0
    pivcols: list[int] = []
    for col in range(n):
        if row == m:
            break
        candidates = np.flatnonzero(M[row:, col])
        if len(candidates) == 0:
            continue
        pivot = row + int(candidates[0])
        if pivot != row:
            M[[row, pivot]] = M[[pivot, row]]
        # Gauss-Jordan: clear the column everywhere else
        hits = np.flatnonzero(M[:, col])
        for r in hits:
            if r != row:
                M[r, :] ^= M[row, :]
        pivcols.append(col)
        row += 1
    return M, pivcols


def gf2_solve_with_nullspace(
    A: np.ndarray, b: np.ndarray
) -> Tuple[Optional[np.ndarray], List[np.ndarray], bool]:
    """Solve A x = b over GF(2), and return a nullspace basis of A.

    Returns:
        x0: particular solution with every free button unpressed, or None
        basis: nullspace vectors v (one per free button) with A v = 0
        solvable: bool
    """
    m, n = A.shape
    R, pivcols = gf2_rref_augmented(A, b)
    R_A = R[:, :n]
    R_b = R[:, n]

    # 0...0 | 1 rows
    if np.any((R_A.sum(axis=1) == 0) & (R_b == 1)):
        return None, [], False

    # In RREF each pivot row only mentions its pivot and free columns.
    x0 = np.zeros((n,), dtype=np.uint8)
    for ri, pc in enumerate(pivcols):
        x0[pc] = R_b[ri]

    frees = [j for j in range(n) if j not in pivcols]
    basis: list[np.ndarray] = []
    for f in frees:
        v = np.zeros((n,), dtype=np.uint8)
        v[f] = 1
        for ri, pc in enumerate(pivcols):
            v[pc] = R_A[ri, f]
        basis.append(v)

    return x0, basis, True


def gf2_min_weight_solution(
    A: np.ndarray, b: np.ndarray, max_candidates: Optional[int] = 1 << 20
) -> Tuple[Optional[np.ndarray], bool]:
    """Return the minimum-Hamming-weight solution to A x = b (if solvable).

    Every one of the 2^k nullspace combinations is materialised at once, so
    more than `max_candidates` of them raises SearchLimitExceeded.
    """
    x0, basis, ok = gf2_solve_with_nullspace(A, b)
    if not ok or x0 is None:
        return None, False
    if not basis:
        return x0, True

    k = len(basis)
    if max_candidates is not None and (1 << k) > max_candidates:
        raise SearchLimitExceeded(
            f"{1 << k} light combinations over {k} free buttons "
            f"exceeds cap {max_candidates}"
        )
    # Row k of `picks` selects the basis vectors in the binary digits of k
    masks = np.arange(1 << k, dtype=np.int64)
    picks = ((masks[:, None] >> np.arange(k)) & 1).astype(np.uint8)
    B = np.stack(basis).astype(np.uint8)
    cands = (x0[None, :] + picks @ B) % 2
    weights = cands.sum(axis=1)
    best = int(np.argmin(weights))
    return cands[best].astype(np.uint8), True
