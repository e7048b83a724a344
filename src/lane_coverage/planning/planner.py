# lane_coverage/planning/planner.py
import time
from collections.abc import Sequence

from lane_coverage.app.hooks import NoopHooks, PlannerHooks
from lane_coverage.app.protocols import GraphAdapter, TourSolver
from lane_coverage.domain.entities.lanes import FullPath, Node
from lane_coverage.domain.errors import InvalidTour, NodeNotFound, PlanningError
from lane_coverage.domain.registry import NodeRegistry
from lane_coverage.planning.explorer import CoverageExplorer
from lane_coverage.planning.matrix import DEFAULT_SENTINEL_COST, AdjacencyMatrixBuilder
from lane_coverage.planning.stitcher import PathStitcher
from lane_coverage.planning.tour_solvers import NearestNeighborTwoOptSolver
from lane_coverage.planning.verifier import CostVerifier, find_revisits
from lane_coverage.runtime.registries import get_strategy


class CoveragePlanner:
    """
    Entry point for full-coverage planning.

    The node registry is taken from the graph once, at construction; a graph
    that changes afterwards makes the "tsp" strategy fail with
    GraphInconsistency rather than plan against stale ordinals.
    """

    def __init__(
        self,
        graph: GraphAdapter,
        *,
        registry: NodeRegistry | None = None,
        solver: TourSolver | None = None,
        strategy: str = "tsp",
        sentinel_cost: float = DEFAULT_SENTINEL_COST,
        timeout_s: float | None = None,
        verify_cost: bool = True,
        warn_on_loops: bool = True,
        hooks: PlannerHooks | None = None,
    ):
        get_strategy(strategy)  # fail fast on typos
        self.graph = graph
        self.registry = registry or NodeRegistry.from_graph(graph)
        self.solver = solver or NearestNeighborTwoOptSolver()
        self.strategy, self.timeout_s = strategy, timeout_s
        self.verify_cost, self.warn_on_loops = verify_cost, warn_on_loops
        self.hooks = hooks or NoopHooks()

        self.matrix_builder = AdjacencyMatrixBuilder(sentinel_cost)
        self.stitcher = PathStitcher(graph, self.registry)
        self.explorer = CoverageExplorer(graph)
        self.verifier = CostVerifier(graph, hooks=self.hooks)

    def plan(
        self, start: Node, goal: Node, *, strategy: str | None = None, timeout_s: float | None = None
    ) -> FullPath:
        return self.plan_checkpoints([start, goal], strategy=strategy, timeout_s=timeout_s)

    def plan_checkpoints(
        self,
        checkpoints: Sequence[Node],
        *,
        strategy: str | None = None,
        timeout_s: float | None = None,
    ) -> FullPath:
        """Plan every consecutive leg and join them at the shared checkpoint."""
        if len(checkpoints) < 2:
            raise InvalidTour("need at least a start and a goal checkpoint")
        name = strategy or self.strategy
        run_leg = get_strategy(name)
        timeout = timeout_s if timeout_s is not None else self.timeout_s

        self.hooks.plan_start(strategy=name, start=checkpoints[0], goal=checkpoints[-1])
        t0 = time.perf_counter()
        try:
            live = self.graph.node_ids()
            for c in checkpoints:
                if c not in live:
                    raise NodeNotFound(c)
            nodes: list[Node] = []
            for a, b in zip(checkpoints, checkpoints[1:]):
                leg = run_leg(self, a, b, timeout)
                nodes.extend(leg.nodes[1:] if nodes else leg.nodes)
        except PlanningError as exc:
            self.hooks.plan_failed(strategy=name, exc=exc)
            raise

        path = FullPath(tuple(nodes))
        cost = self.verifier.verify(path).total if self.verify_cost else None
        if self.warn_on_loops:
            revisits = find_revisits(path)
            if revisits:
                self.hooks.route_looped(revisits=revisits)
        self.hooks.plan_end(
            strategy=name, length=len(path), cost=cost, ms=(time.perf_counter() - t0) * 1000
        )
        return path
