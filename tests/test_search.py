import itertools

import numpy as np
import pytest

from joltage.algebra import build_joltage_system, build_toggle_matrix, button_caps
from joltage.evaluation.metrics import verify_assignment
from joltage.integer.bounds import estimate_bounds
from joltage.integer.classify import build_pivot_map, pivot_expressions, pivot_values
from joltage.integer.constraints import ConstraintSet, derive_constraints
from joltage.integer.elimination import integer_rref
from joltage.integer.errors import NoFeasibleAssignmentError, SearchLimitExceeded
from joltage.integer.search import _ordered_range, minimize, search_size
from joltage.machine import Machine


def _constraint_set(machine):
    n = machine.num_buttons
    R = integer_rref(build_joltage_system(machine), n)
    pivots = build_pivot_map(R, n)
    exprs = pivot_expressions(R, pivots)
    return derive_constraints(exprs, pivots), exprs


@pytest.fixture
def first_example():
    return Machine.parse("[.##.] (3) (1,3) (2) (2,3) (0,2) (0,1) {3,5,4,7}")


def test_ordered_range_follows_objective_sign():
    assert list(_ordered_range(1, 3, 0)) == [1, 2, 3]
    assert list(_ordered_range(1, 3, 5)) == [1, 2, 3]
    assert list(_ordered_range(1, 3, -1)) == [3, 2, 1]


def test_minimize_example(first_example):
    cs, exprs = _constraint_set(first_example)
    result = minimize(cs, {3: (0, 6), 5: (0, 3)})
    assert result.objective == 10
    assert result.visited == 7 * 4
    full = pivot_values(exprs, result.values)
    assert verify_assignment(first_example, full[:-1])
    assert int(full[:-1].sum()) == 10


def test_widening_bounds_never_raises_minimum(first_example):
    cs, _ = _constraint_set(first_example)
    narrow = minimize(cs, {3: (0, 0), 5: (0, 3)}).objective
    wide = minimize(cs, {3: (0, 4), 5: (0, 3)}).objective
    assert narrow == 11
    assert wide == 10
    assert wide <= narrow


def test_search_cap(first_example):
    cs, _ = _constraint_set(first_example)
    bounds = {3: (0, 4), 5: (0, 3)}
    assert search_size(bounds) == 20
    with pytest.raises(SearchLimitExceeded):
        minimize(cs, bounds, max_assignments=19)
    assert minimize(cs, bounds, max_assignments=20).objective == 10


def test_no_feasible_assignment(first_example):
    cs, _ = _constraint_set(first_example)
    # x2 = 1 - x3 + x5 is negative everywhere in this box
    with pytest.raises(NoFeasibleAssignmentError):
        minimize(cs, {3: (3, 4), 5: (0, 0)})


def test_no_free_variables():
    m = Machine.parse("[..] (0) (1) {3,5}")
    cs, exprs = _constraint_set(m)
    result = minimize(cs, {})
    assert result.objective == 8
    assert result.visited == 1
    assert pivot_values(exprs, result.values)[:-1].tolist() == [3, 5]


def _brute_force(machine):
    A = build_toggle_matrix(machine)
    b = np.asarray(machine.joltages)
    caps = [high for _, high in button_caps(machine).values()]
    best = None
    for x in itertools.product(*(range(c + 1) for c in caps)):
        if np.array_equal(A @ np.array(x), b):
            best = sum(x) if best is None else min(best, sum(x))
    return best


def _random_machine(rng):
    width = int(rng.integers(2, 5))
    num_buttons = int(rng.integers(2, 5))
    buttons = [int(rng.integers(1, 1 << width)) for _ in range(num_buttons)]
    presses = rng.integers(0, 3, size=num_buttons)
    A = np.array([[(mask >> i) & 1 for mask in buttons] for i in range(width)])
    return Machine(0, buttons, (A @ presses).tolist(), width=width)


@pytest.mark.parametrize("seed", range(25))
def test_accepted_assignments_satisfy_original_equations(seed):
    machine = _random_machine(np.random.default_rng(seed))
    cs, exprs = _constraint_set(machine)
    caps = button_caps(machine)
    bounds = {var: caps[var] for var in cs.free}
    result = minimize(cs, bounds)
    full = pivot_values(exprs, result.values)[:-1]
    assert verify_assignment(machine, full)
    assert result.objective == int(full.sum())
    assert result.objective == _brute_force(machine)


@pytest.fixture
def scaled_machine():
    # reduces to 2 x0 + x3 = 3, 2 x1 - x3 = 3, 2 x2 + x3 = 7
    return Machine.parse("[...] (0,1) (1,2) (0,2) (0) {5,3,5}")


def test_scaled_pivots_are_searched_with_divisibility(scaled_machine):
    cs, exprs = _constraint_set(scaled_machine)
    assert cs.scale == 2
    assert [pe.coefficient for pe in exprs] == [2, 2, 2]
    bounds = estimate_bounds(cs)
    assert bounds == {3: (0, 3)}
    result = minimize(cs, bounds)
    full = pivot_values(exprs, result.values)[:-1]
    assert result.objective == 7
    assert full.tolist() == [1, 2, 3, 1]
    assert verify_assignment(scaled_machine, full)


def test_parity_rules_out_cheapest_candidate(scaled_machine):
    cs, _ = _constraint_set(scaled_machine)
    # x3 = 0 would give the smallest objective but leaves x0 = 3 / 2
    with pytest.raises(NoFeasibleAssignmentError):
        minimize(cs, {3: (0, 0)})
    result = minimize(cs, {3: (0, 1)})
    assert result.objective == 7
    assert result.visited == 2
    assert int(result.values[3]) == 1


def test_objective_divisibility_alone_filters_half_units(scaled_machine):
    cs, _ = _constraint_set(scaled_machine)
    objective_only = ConstraintSet(
        cs.non_negative() + [cs.constraints[-1]], cs.objective, cs.scale, cs.free
    )
    assert cs.constraints[-1].coefficients.tolist() == cs.objective.tolist()
    # 2 * total = 13 + x3 must be even
    assert minimize(objective_only, {3: (0, 3)}).objective == 7


@pytest.mark.parametrize(
    "line",
    [
        "[...] (0,1) (1,2) (0,2) (0) {5,3,5}",
        "[.##.] (3) (1,3) (2) (2,3) (0,2) (0,1) {3,5,4,7}",
    ],
)
def test_stacked_check_agrees_with_each_constraint(line):
    machine = Machine.parse(line)
    cs, _ = _constraint_set(machine)
    checker = cs.stacked()
    caps = button_caps(machine)
    values = np.zeros(cs.num_variables + 1, dtype=np.int64)
    values[-1] = 1
    for combo in itertools.product(*(range(caps[v][1] + 1) for v in cs.free)):
        values[cs.free] = combo
        assert checker.accepts(values) == cs.is_satisfied(values)
