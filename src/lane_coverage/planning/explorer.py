# lane_coverage/planning/explorer.py
"""
TSP-free coverage: depth-first over successor edges with shortest-path
backtracking. Greedy; the walk is always connected but carries no optimality
guarantee.
"""

from dataclasses import dataclass
from enum import Enum

from lane_coverage.app.protocols import GraphAdapter
from lane_coverage.domain.entities.lanes import FullPath, Node, Relation
from lane_coverage.domain.errors import NodeNotFound
from lane_coverage.planning.stitcher import splice


class ExplorerState(Enum):
    FRONTIER = "frontier"
    BACKTRACKING = "backtracking"
    DONE = "done"


@dataclass(frozen=True)
class StepOutcome:
    state: ExplorerState
    candidate: Node | None
    appended: tuple[Node, ...] = ()
    spliced: bool = False


class CoverageWalk:
    """One exploration in progress. ``path[-1]`` is where the vehicle is."""

    def __init__(self, graph: GraphAdapter, start: Node, goal: Node):
        live = graph.node_ids()
        for n in (start, goal):
            if n not in live:
                raise NodeNotFound(n)
        self.G, self.goal = graph, goal
        self.path: list[Node] = [start]
        self.visited: set[Node] = {start}
        self.stack: list[Node] = list(graph.successors(start))
        self.state = ExplorerState.FRONTIER

    @property
    def tail(self) -> Node:
        return self.path[-1]

    def step(self) -> StepOutcome:
        if self.state is ExplorerState.DONE:
            return StepOutcome(ExplorerState.DONE, None)
        if not self.stack:
            return self._close()

        c = self.stack.pop()
        if c in self.visited:
            self.state = ExplorerState.FRONTIER
            return StepOutcome(self.state, c)

        if self.G.relation(self.tail, c) is Relation.SUCCESSOR:
            self.state = ExplorerState.FRONTIER
            self.visited.add(c)
            self.path.append(c)
            self.stack.extend(self.G.successors(c))
            return StepOutcome(self.state, c, (c,))

        self.state = ExplorerState.BACKTRACKING
        appended = self._splice_to(c)
        for n in appended:
            if n not in self.visited:
                self.visited.add(n)
                self.stack.extend(self.G.successors(n))
        return StepOutcome(self.state, c, appended, spliced=True)

    def run(self) -> FullPath:
        while self.state is not ExplorerState.DONE:
            self.step()
        return FullPath(tuple(self.path))

    def _close(self) -> StepOutcome:
        appended = self._splice_to(self.goal)
        self.visited.update(appended)
        self.state = ExplorerState.DONE
        return StepOutcome(self.state, self.goal, appended, spliced=True)

    def _splice_to(self, target: Node) -> tuple[Node, ...]:
        before = len(self.path)
        splice(self.path, self.G.shortest_path(self.tail, target), target)
        return tuple(self.path[before:])


class CoverageExplorer:
    def __init__(self, graph: GraphAdapter):
        self.G = graph

    def walk(self, start: Node, goal: Node) -> CoverageWalk:
        return CoverageWalk(self.G, start, goal)

    def explore(self, start: Node, goal: Node) -> FullPath:
        return self.walk(start, goal).run()
