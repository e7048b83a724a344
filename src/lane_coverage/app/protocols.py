from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np

from lane_coverage.domain.entities.lanes import Node, Relation, Tour


# ------------- Graph --------------------
@runtime_checkable
class GraphAdapter(Protocol):
    """
    Read-only query surface over the lane graph.
    Responsibilities:
      • Enumerate passable nodes.
      • Answer direct-edge questions (cost, relation, successors).
      • Resolve multi-hop connectivity via shortest paths.
    Costs are non-negative; ``None`` means "no such edge / no such path".
    """

    def node_ids(self) -> set[Node]: ...
    def edge_cost(self, a: Node, b: Node) -> float | None: ...
    def shortest_path(self, a: Node, b: Node) -> Sequence[Node] | None: ...
    def relation(self, a: Node, b: Node) -> Relation: ...
    def successors(self, a: Node) -> Sequence[Node]: ...


@runtime_checkable
class SupportsPathCosts(Protocol):
    """Optional single-source fast path for matrix building."""

    def path_costs_from(self, a: Node) -> dict[Node, float]: ...


# ------------- Tour solving --------------------
@runtime_checkable
class TourSolver(Protocol):
    """
    Approximate a minimum-cost Hamiltonian cycle over a dense, asymmetric,
    non-negative cost matrix. Returns a permutation of range(len(matrix)).
    Implementations raise SolverFailure when they cannot produce one.
    """

    name: str

    def solve(self, matrix: np.ndarray, *, timeout_s: float | None = None) -> Tour: ...


@runtime_checkable
class IdGenerator(Protocol):
    def next_id(self) -> str: ...


@runtime_checkable
class ProcessRunner(Protocol):
    """Run an external command in ``cwd``; raise SolverFailure on any failure."""

    def __call__(self, argv: list[str], *, cwd: str, timeout_s: float | None) -> None: ...
