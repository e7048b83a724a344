import numpy as np

from lane_coverage.app.protocols import TourSolver
from lane_coverage.domain.entities.lanes import Tour, TourResult
from lane_coverage.domain.errors import SolverFailure

TRIVIAL_DIMENSION = 2


def identity_order(n: int) -> Tour:
    return list(range(n))


def tour_cost(costs: np.ndarray, order: Tour) -> float:
    """Cyclic cost: the last city connects back to the first."""
    if len(order) < 2:
        return 0.0
    a = np.asarray(order)
    return float(costs[a, np.roll(a, -1)].sum())


def validate_order(order, n: int) -> Tour:
    order = [int(x) for x in order]
    if len(order) != n:
        raise SolverFailure(f"solver returned {len(order)} cities, expected {n}")
    if sorted(order) != list(range(n)):
        raise SolverFailure("solver output is not a permutation")
    return order


def solve_tour(solver: TourSolver, costs: np.ndarray, *, timeout_s: float | None = None) -> TourResult:
    """Run ``solver`` and fall back to the identity order on SolverFailure."""
    n = costs.shape[0]
    if n <= TRIVIAL_DIMENSION:
        return TourResult(order=identity_order(n))
    try:
        order = validate_order(solver.solve(costs, timeout_s=timeout_s), n)
    except SolverFailure as exc:
        return TourResult(order=identity_order(n), failure=exc)
    return TourResult(order=order)


class NearestNeighborTwoOptSolver(TourSolver):
    """
    Nearest-neighbour construction from a handful of start cities, each
    polished with 2-opt. Segment reversal changes the direction of the inner
    edges, so deltas use forward and backward prefix sums (ATSP-safe).
    Deterministic: ties resolve to the lowest index.
    """

    name = "nearest_neighbor"

    def __init__(self, starts: int = 8, max_passes: int = 50):
        self.starts, self.max_passes = max(1, starts), max(0, max_passes)

    def solve(self, matrix: np.ndarray, *, timeout_s: float | None = None) -> Tour:
        costs = np.asarray(matrix, dtype=float)
        n = costs.shape[0]
        if n <= TRIVIAL_DIMENSION:
            return identity_order(n)
        if costs.shape != (n, n) or not np.all(np.isfinite(costs)):
            raise SolverFailure(f"cost matrix must be square and finite, got shape {costs.shape}")

        best, best_cost = None, np.inf
        for s in sorted({int(x) for x in np.linspace(0, n - 1, min(self.starts, n))}):
            order = self._two_opt(self._nearest_neighbor(costs, s), costs)
            c = tour_cost(costs, order)
            if c < best_cost - 1e-9:
                best, best_cost = order, c
        return best

    @staticmethod
    def _nearest_neighbor(costs: np.ndarray, start: int) -> Tour:
        n = costs.shape[0]
        visited = np.zeros(n, dtype=bool)
        visited[start] = True
        order = [start]
        cur = start
        for _ in range(n - 1):
            cur = int(np.argmin(np.where(visited, np.inf, costs[cur])))
            visited[cur] = True
            order.append(cur)
        return order

    def _two_opt(self, order: Tour, costs: np.ndarray) -> Tour:
        a = np.asarray(order)
        n = len(a)
        for _ in range(self.max_passes):
            improved = False
            for i in range(1, n - 1):
                fwd = np.concatenate(([0.0], np.cumsum(costs[a[:-1], a[1:]])))
                bwd = np.concatenate(([0.0], np.cumsum(costs[a[1:], a[:-1]])))
                js = np.arange(i + 1, n)
                prev, nxt = a[i - 1], a[(js + 1) % n]
                old = costs[prev, a[i]] + (fwd[js] - fwd[i]) + costs[a[js], nxt]
                new = costs[prev, a[js]] + (bwd[js] - bwd[i]) + costs[a[i], nxt]
                k = int(np.argmin(new - old))
                if new[k] - old[k] < -1e-9:
                    j = int(js[k])
                    a[i : j + 1] = a[i : j + 1][::-1].copy()
                    improved = True
            if not improved:
                break
        return [int(x) for x in a]
