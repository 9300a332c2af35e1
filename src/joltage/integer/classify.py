from __future__ import annotations

from dataclasses import dataclass

import numpy as np

UNASSIGNED = -1


@dataclass(frozen=True)
class PivotMap:
    """Pivot bookkeeping of a reduced system.

    pivot_col_of_row[r] is the pivot column of row r and
    pivot_row_of_col[c] the row pivoting on column c, UNASSIGNED otherwise.
    """

    pivot_col_of_row: np.ndarray
    pivot_row_of_col: np.ndarray

    @property
    def num_variables(self) -> int:
        return len(self.pivot_row_of_col)

    @property
    def pivot_rows(self) -> list[int]:
        return [int(r) for r in np.flatnonzero(self.pivot_col_of_row != UNASSIGNED)]

    @property
    def free_variables(self) -> list[int]:
        return [int(c) for c in np.flatnonzero(self.pivot_row_of_col == UNASSIGNED)]

    def is_free(self, col: int) -> bool:
        return self.pivot_row_of_col[col] == UNASSIGNED


@dataclass(frozen=True)
class PivotExpression:
    """coefficient * x[column] == expression @ [x..., 1]

    `expression` only mentions free variables plus the constant in its
    last slot.
    """

    row: int
    column: int
    coefficient: int
    expression: np.ndarray


def build_pivot_map(R: np.ndarray, num_variables: int) -> PivotMap:
    m = R.shape[0]
    col_of_row = np.full(m, UNASSIGNED, dtype=np.int64)
    row_of_col = np.full(num_variables, UNASSIGNED, dtype=np.int64)
    for r in range(m):
        nz = np.flatnonzero(R[r, :num_variables])
        if len(nz) == 0:
            continue
        c = int(nz[0])
        assert row_of_col[c] == UNASSIGNED, f"column {c} pivots twice"
        col_of_row[r] = c
        row_of_col[c] = r
    col_of_row.setflags(write=False)
    row_of_col.setflags(write=False)
    return PivotMap(col_of_row, row_of_col)


def pivot_expressions(R: np.ndarray, pivots: PivotMap) -> list[PivotExpression]:
    """Express every pivot variable through the free variables.

    Moving the free terms to the right-hand side flips their sign; the
    division by the pivot coefficient is left to the constraint layer.
    """
    n = pivots.num_variables
    out = []
    for r in pivots.pivot_rows:
        c = int(pivots.pivot_col_of_row[r])
        expr = np.zeros(n + 1, dtype=np.int64)
        expr[n] = R[r, n]
        for f in range(c + 1, n):
            if R[r, f] and pivots.is_free(f):
                expr[f] = -R[r, f]
            else:
                assert R[r, f] == 0, "pivot column left uncleared"
        out.append(PivotExpression(r, c, int(R[r, c]), expr))
    return out


def pivot_values(expressions: list[PivotExpression], values: np.ndarray) -> np.ndarray:
    """Fill in the pivot variables of `values` (length n + 1, last entry 1)."""
    full = np.array(values, dtype=np.int64, copy=True)
    for pe in expressions:
        num = int(pe.expression @ full)
        q, rem = divmod(num, pe.coefficient)
        assert rem == 0, f"x{pe.column} is not integral"
        full[pe.column] = q
    return full
