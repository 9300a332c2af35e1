from __future__ import annotations

import math

import numpy as np

from .errors import InconsistentSystemError


def _eliminate_entry(M: np.ndarray, target: int, source: int, col: int) -> None:
    """Zero M[target, col] using row `source`, scaling both rows by LCM
    multipliers so no fraction is ever introduced."""
    p = int(M[source, col])
    t = int(M[target, col])
    lcm = math.lcm(abs(p), abs(t))
    M[target, :] = (lcm // t) * M[target, :] - (lcm // p) * M[source, :]
    # keep entries small; dividing a whole equation by a common factor is exact
    g = int(np.gcd.reduce(M[target, :]))
    if g > 1:
        M[target, :] //= g


def _find_pivot_col(row: np.ndarray, num_variables: int) -> int | None:
    nz = np.flatnonzero(row[:num_variables])
    return int(nz[0]) if len(nz) else None


def forward_eliminate(M: np.ndarray, num_variables: int) -> int:
    """Reduce M to row-echelon form in place; return the number of pivot rows."""
    m = M.shape[0]
    row = 0
    for col in range(num_variables):
        if row == m:
            break
        candidates = np.flatnonzero(M[row:, col])
        if len(candidates) == 0:
            continue
        pivot = row + int(candidates[0])
        if pivot != row:
            M[[row, pivot]] = M[[pivot, row]]
        for r in range(row + 1, m):
            if M[r, col]:
                _eliminate_entry(M, r, row, col)
        row += 1
    return row


def _normalize_row(M: np.ndarray, r: int, col: int) -> None:
    # Exact division only: the gcd divides every entry, and the sign makes
    # the pivot positive. A pivot that does not divide the RHS stays > 1.
    g = int(np.gcd.reduce(M[r, :]))
    if M[r, col] < 0:
        g = -g
    if g != 1:
        M[r, :] //= g


def back_substitute(M: np.ndarray, num_variables: int) -> None:
    """Normalize each pivot row and clear its column above it, bottom-up."""
    for r in range(M.shape[0] - 1, -1, -1):
        col = _find_pivot_col(M[r], num_variables)
        if col is None:
            continue
        _normalize_row(M, r, col)
        for above in range(r):
            if M[above, col]:
                _eliminate_entry(M, above, r, col)


def check_consistency(M: np.ndarray, num_variables: int) -> None:
    zero_rows = ~M[:, :num_variables].any(axis=1)
    bad = np.flatnonzero(zero_rows & (M[:, num_variables] != 0))
    if len(bad):
        r = int(bad[0])
        raise InconsistentSystemError(
            f"Row {r} reduces to 0 = {int(M[r, num_variables])}"
        )


def integer_rref(M: np.ndarray, num_variables: int | None = None) -> np.ndarray:
    """Return the reduced form of augmented integer matrix [A | b].

    Only integer multiply/subtract and exact division are used, so the
    result describes exactly the same integer solutions as the input.
    Raises InconsistentSystemError when the system has no solution at all.
    """
    R = np.array(M, dtype=np.int64, copy=True)
    if num_variables is None:
        num_variables = R.shape[1] - 1
    forward_eliminate(R, num_variables)
    back_substitute(R, num_variables)
    check_consistency(R, num_variables)
    return R
