# lane_coverage/planning/matrix.py
import logging
from dataclasses import dataclass

import numpy as np

from lane_coverage.app.protocols import GraphAdapter, SupportsPathCosts
from lane_coverage.domain.errors import GraphInconsistency
from lane_coverage.domain.registry import NodeRegistry

DEFAULT_SENTINEL_COST = 1_000_000.0

log = logging.getLogger("lane_coverage.matrix")


@dataclass
class AdjacencyMatrix:
    costs: np.ndarray  # (N+1, N+1), row = from, col = to
    sentinel_cost: float

    @property
    def dimension(self) -> int:
        return self.costs.shape[0]

    @property
    def sentinel(self) -> int:
        return self.dimension - 1

    def reachable(self, i: int, j: int) -> bool:
        return bool(self.costs[i, j] < self.sentinel_cost)


def path_cost(graph: GraphAdapter, nodes) -> float | None:
    total = 0.0
    for a, b in zip(nodes, nodes[1:]):
        c = graph.edge_cost(a, b)
        if c is None:
            return None
        total += c
    return total


class AdjacencyMatrixBuilder:
    def __init__(self, sentinel_cost: float = DEFAULT_SENTINEL_COST):
        self.sentinel_cost = float(sentinel_cost)

    def build(self, graph: GraphAdapter, registry: NodeRegistry) -> AdjacencyMatrix:
        live = graph.node_ids()
        if len(live) != len(registry):
            raise GraphInconsistency(
                f"registry holds {len(registry)} nodes, graph has {len(live)} passable nodes"
            )
        stale = [n for n in registry.nodes() if n not in live]
        if stale:
            raise GraphInconsistency(f"registry refers to nodes no longer in the graph: {stale!r}")

        n = len(registry)
        m = np.full((n + 1, n + 1), np.inf)
        if isinstance(graph, SupportsPathCosts):
            self._fill_single_source(m, graph, registry)
        else:
            self._fill_pairwise(m, graph, registry)
        self._warn_if_saturated(m, n)
        # unreachable pairs, the diagonal and the closing row/column take the sentinel cost
        m[~np.isfinite(m)] = self.sentinel_cost
        np.fill_diagonal(m, self.sentinel_cost)
        return AdjacencyMatrix(costs=m, sentinel_cost=self.sentinel_cost)

    def _warn_if_saturated(self, m: np.ndarray, n: int) -> None:
        # real costs at or above the sentinel read as unreachable
        real = m[:n, :n].copy()
        np.fill_diagonal(real, 0.0)
        hits = int(np.count_nonzero(np.isfinite(real) & (real >= self.sentinel_cost)))
        if hits:
            log.warning(
                "%d finite path costs reach sentinel_cost=%s and will look unreachable",
                hits,
                self.sentinel_cost,
            )

    def _fill_pairwise(self, m: np.ndarray, graph: GraphAdapter, registry: NodeRegistry) -> None:
        nodes = registry.nodes()
        for i, a in enumerate(nodes):
            for j, b in enumerate(nodes):
                if i == j:
                    continue
                path = graph.shortest_path(a, b)
                if not path:
                    continue
                c = path_cost(graph, list(path))
                if c is not None:
                    m[i, j] = c

    def _fill_single_source(self, m: np.ndarray, graph, registry: NodeRegistry) -> None:
        for i, a in enumerate(registry.nodes()):
            for b, c in graph.path_costs_from(a).items():
                if b in registry:
                    m[i, registry.ordinal(b)] = c
