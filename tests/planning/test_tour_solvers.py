import itertools

import numpy as np
import pytest

from lane_coverage.domain.errors import SolverFailure
from lane_coverage.planning.tour_solvers import (
    NearestNeighborTwoOptSolver,
    identity_order,
    solve_tour,
    tour_cost,
    validate_order,
)


class ExplodingSolver:
    name = "exploding"

    def __init__(self):
        self.calls = 0

    def solve(self, matrix, *, timeout_s=None):
        self.calls += 1
        raise AssertionError("heavy path must not run")


class FixedSolver:
    name = "fixed"

    def __init__(self, order):
        self.order = order

    def solve(self, matrix, *, timeout_s=None):
        return self.order


def _brute_force(costs: np.ndarray) -> float:
    n = costs.shape[0]
    return min(tour_cost(costs, [0, *p]) for p in itertools.permutations(range(1, n)))


def test_two_city_matrix_skips_solver():
    solver = ExplodingSolver()
    result = solve_tour(solver, np.zeros((2, 2)))
    assert result.order == [0, 1]
    assert not result.fallback
    assert solver.calls == 0


def test_wrong_length_falls_back_to_identity():
    result = solve_tour(FixedSolver([0, 2, 1]), np.ones((5, 5)))
    assert result.order == [0, 1, 2, 3, 4]
    assert isinstance(result.failure, SolverFailure)
    assert result.fallback


def test_duplicate_cities_fall_back_to_identity():
    result = solve_tour(FixedSolver([0, 1, 1]), np.ones((3, 3)))
    assert result.order == identity_order(3)
    assert result.fallback


def test_validate_order_accepts_any_permutation():
    assert validate_order(np.array([2, 0, 1]), 3) == [2, 0, 1]
    with pytest.raises(SolverFailure):
        validate_order([0, 1], 3)


def test_tour_cost_is_cyclic():
    c = np.array([[0, 1, 9], [9, 0, 1], [1, 9, 0]], dtype=float)
    assert tour_cost(c, [0, 1, 2]) == 3.0
    assert tour_cost(c, [0, 2, 1]) == 27.0


def test_nearest_neighbor_two_opt_returns_permutation():
    rng = np.random.default_rng(7)
    c = rng.uniform(1, 100, size=(25, 25))
    order = NearestNeighborTwoOptSolver().solve(c)
    assert sorted(order) == list(range(25))


def test_nearest_neighbor_two_opt_is_deterministic():
    rng = np.random.default_rng(3)
    c = rng.uniform(1, 100, size=(15, 15))
    s = NearestNeighborTwoOptSolver(starts=4)
    assert s.solve(c) == s.solve(c)


def test_two_opt_never_worse_than_plain_nearest_neighbor():
    rng = np.random.default_rng(11)
    c = rng.uniform(1, 100, size=(20, 20))
    plain = NearestNeighborTwoOptSolver(starts=1, max_passes=0).solve(c)
    polished = NearestNeighborTwoOptSolver(starts=1, max_passes=50).solve(c)
    assert tour_cost(c, polished) <= tour_cost(c, plain) + 1e-9


def test_small_asymmetric_instance_is_solved_optimally():
    # directed ring 0->1->...->6->0 is cheap, everything else expensive
    n = 7
    c = np.full((n, n), 50.0)
    for i in range(n):
        c[i, (i + 1) % n] = 1.0
    c[2, 5] = c[5, 3] = 2.0  # tempting shortcuts that break the ring
    order = NearestNeighborTwoOptSolver().solve(c)
    assert tour_cost(c, order) == pytest.approx(_brute_force(c)) == 7.0


def test_non_finite_matrix_is_a_solver_failure():
    c = np.ones((4, 4))
    c[1, 2] = np.inf
    with pytest.raises(SolverFailure):
        NearestNeighborTwoOptSolver().solve(c)
