# lane_coverage/planning/external_solvers.py
"""
Out-of-process tour solvers speaking TSPLIB.

Both adapters write their problem into a fresh ScratchSpace, run the engine
through an injectable ProcessRunner under a timeout, parse the result and let
the scratch directory go on every exit path. Anything unexpected is raised as
SolverFailure; ``solve_tour`` turns that into the identity fallback.

TSPLIB reference: http://comopt.ifi.uni-heidelberg.de/software/TSPLIB95/
"""

import numpy as np

from lane_coverage.app.protocols import IdGenerator, ProcessRunner, TourSolver
from lane_coverage.domain.entities.lanes import Tour
from lane_coverage.domain.errors import SolverFailure
from lane_coverage.planning.tour_solvers import TRIVIAL_DIMENSION, identity_order
from lane_coverage.runtime.scratch import ScratchSpace, UniqueIds, run_process

INT32_MAX = 2**31 - 1


def write_tsplib(costs: np.ndarray, *, name: str, kind: str = "ATSP", comment: str = "") -> str:
    n = costs.shape[0]
    weights = np.trunc(costs).astype(np.int64)
    lines = [
        f"NAME: {name}",
        f"TYPE: {kind}",
        f"COMMENT: {comment or 'lane coverage tour'}",
        f"DIMENSION: {n}",
        "EDGE_WEIGHT_TYPE: EXPLICIT",
        "EDGE_WEIGHT_FORMAT: FULL_MATRIX",
        "EDGE_WEIGHT_SECTION",
    ]
    lines += [" ".join(str(int(w)) for w in row) for row in weights]
    lines.append("EOF")
    return "\n".join(lines) + "\n"


def _ints(tokens, what: str) -> list[int]:
    try:
        return [int(t) for t in tokens]
    except ValueError as exc:
        raise SolverFailure(f"malformed {what}: {exc}") from exc


def parse_lkh_tour(text: str) -> Tour:
    """1-based ids after TOUR_SECTION, terminated by -1, EOF or end of input."""
    lines = text.splitlines()
    try:
        start = next(i for i, ln in enumerate(lines) if ln.strip().upper() == "TOUR_SECTION")
    except StopIteration:
        raise SolverFailure("LKH tour file has no TOUR_SECTION") from None
    order: list[int] = []
    for ln in lines[start + 1 :]:
        tokens = ln.split()
        if not tokens or tokens[0].upper() == "EOF":
            break
        values = _ints(tokens, "LKH tour")
        if -1 in values:
            order += [v - 1 for v in values[: values.index(-1)]]
            break
        order += [v - 1 for v in values]
    return order


def symmetrize(costs: np.ndarray) -> np.ndarray:
    """
    Jonker-Volgenant ATSP -> STSP on 2N cities, shifted to non-negative ints.
    City i pairs with ghost N+i at cost 0; ghost N+i -> city j costs c[i, j] + M;
    same-side edges are forbidden. Optimal tours alternate city, ghost.
    """
    c = np.trunc(costs).astype(np.int64)
    n = c.shape[0]
    big = int(c.max()) + 1
    forbidden = big * (2 * n + 1)
    if forbidden > INT32_MAX:
        raise SolverFailure(f"instance too large for a 32-bit symmetric transform (n={n})")
    d = np.full((2 * n, 2 * n), forbidden, dtype=np.int64)
    cross = c + big
    d[n:, :n] = cross  # ghost i -> city j
    d[:n, n:] = cross.T
    for i in range(n):
        d[i, n + i] = d[n + i, i] = 0
        d[i, i] = d[n + i, n + i] = 0
    return d


def fold_symmetric_tour(seq: list[int], n: int) -> Tour:
    """Inverse of ``symmetrize``: read the 2N tour in its city->ghost orientation."""
    if len(seq) != 2 * n:
        raise SolverFailure(f"symmetric tour has {len(seq)} cities, expected {2 * n}")
    for s in (seq, seq[::-1]):
        m = len(s)
        for r in range(m):
            if s[r] < n and s[(r + 1) % m] == s[r] + n:
                rotated = s[r:] + s[:r]
                order = rotated[::2]
                if all(g == c + n for c, g in zip(order, rotated[1::2])):
                    return order
                break
    raise SolverFailure("symmetric tour does not alternate city and ghost")


def parse_concorde_tour(text: str) -> list[int]:
    """Concorde writes the dimension, then 0-based city ids."""
    values = _ints(text.split(), "concorde tour")
    if not values:
        raise SolverFailure("empty concorde tour")
    dim, order = values[0], values[1:]
    if len(order) != dim:
        raise SolverFailure(f"concorde tour truncated: header says {dim}, got {len(order)}")
    return order


class _ExternalSolver(TourSolver):
    name = "external"
    prefix = "tsp"

    def __init__(
        self,
        binary: str,
        *,
        ids: IdGenerator | None = None,
        runner: ProcessRunner = run_process,
        scratch_dir: str | None = None,
        timeout_s: float | None = 60.0,
    ):
        self.binary, self.runner, self.scratch_dir, self.timeout_s = (
            binary,
            runner,
            scratch_dir,
            timeout_s,
        )
        self.ids = ids or UniqueIds()

    def solve(self, matrix: np.ndarray, *, timeout_s: float | None = None) -> Tour:
        costs = np.asarray(matrix, dtype=float)
        n = costs.shape[0]
        if n <= TRIVIAL_DIMENSION:
            return identity_order(n)
        timeout = timeout_s if timeout_s is not None else self.timeout_s
        try:
            with ScratchSpace(self.ids, prefix=self.prefix, root=self.scratch_dir) as scratch:
                return self._solve_in(scratch, costs, timeout)
        except OSError as exc:
            # unusable scratch root or failed problem write
            raise SolverFailure(f"{self.name}: scratch space unavailable: {exc}") from exc

    def _solve_in(self, scratch: ScratchSpace, costs: np.ndarray, timeout: float | None) -> Tour:
        raise NotImplementedError

    @staticmethod
    def _read(scratch: ScratchSpace, name: str) -> str:
        try:
            return scratch.path(name).read_text()
        except OSError as exc:
            raise SolverFailure(f"solver produced no output file {name!r}") from exc


class LKHTourSolver(_ExternalSolver):
    """LKH-2/3 (http://webhotel4.ruc.dk/~keld/research/LKH/) on the ATSP directly."""

    name = "lkh"
    prefix = "lkh"
    PROBLEM, PARAMS, TOUR = "problem.atsp", "problem.par", "problem.tour"

    def __init__(self, binary: str = "LKH", *, runs: int = 1, seed: int | None = None, **kw):
        super().__init__(binary, **kw)
        self.runs, self.seed = runs, seed

    def _solve_in(self, scratch, costs, timeout):
        scratch.path(self.PROBLEM).write_text(
            write_tsplib(costs, name=f"lane_coverage_{scratch.dir.name}", kind="ATSP")
        )
        params = [f"PROBLEM_FILE = {self.PROBLEM}", f"TOUR_FILE = {self.TOUR}", f"RUNS = {self.runs}"]
        if self.seed is not None:
            params.append(f"SEED = {self.seed}")
        scratch.path(self.PARAMS).write_text("\n".join(params) + "\n")

        self.runner([self.binary, self.PARAMS], cwd=str(scratch.dir), timeout_s=timeout)
        return parse_lkh_tour(self._read(scratch, self.TOUR))


class ConcordeTourSolver(_ExternalSolver):
    """Concorde (http://www.math.uwaterloo.ca/tsp/concorde.html); symmetric only."""

    name = "concorde"
    prefix = "concorde"
    PROBLEM, TOUR = "problem.tsp", "problem.sol"

    def __init__(self, binary: str = "concorde", **kw):
        super().__init__(binary, **kw)

    def _solve_in(self, scratch, costs, timeout):
        n = costs.shape[0]
        scratch.path(self.PROBLEM).write_text(
            write_tsplib(symmetrize(costs), name=f"lane_coverage_{scratch.dir.name}", kind="TSP")
        )
        self.runner(
            [self.binary, "-o", self.TOUR, self.PROBLEM], cwd=str(scratch.dir), timeout_s=timeout
        )
        return fold_symmetric_tour(parse_concorde_tour(self._read(scratch, self.TOUR)), n)
