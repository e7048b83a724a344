from collections.abc import Sequence

from lane_coverage.app.hooks import NoopHooks, PlannerHooks
from lane_coverage.app.protocols import GraphAdapter
from lane_coverage.domain.entities.lanes import CostReport, Node


class CostVerifier:
    """
    Recompute a walk's cost from direct edges only.
    Stops at the first pair without a successor/lateral relation and reports a
    cost mismatch through the hooks; never raises for a broken walk.
    """

    def __init__(self, graph: GraphAdapter, hooks: PlannerHooks | None = None):
        self.G = graph
        self.hooks = hooks or NoopHooks()

    def verify(self, path: Sequence[Node]) -> CostReport:
        nodes = list(path)
        total, checked = 0.0, 0
        for a, b in zip(nodes, nodes[1:]):
            c = self.G.edge_cost(a, b) if self.G.relation(a, b).drivable else None
            if c is None:
                self.hooks.cost_mismatch(source=a, target=b, partial=total)
                return CostReport(total=total, complete=False, broken_at=(a, b), pairs_checked=checked)
            total += c
            checked += 1
        return CostReport(total=total, pairs_checked=checked)

    def cost(self, path: Sequence[Node]) -> float:
        return self.verify(path).total


def find_revisits(path: Sequence[Node]) -> list[Node]:
    """Nodes that appear more than once, in order of first repeat."""
    seen, repeats = set(), []
    for n in path:
        if n in seen and n not in repeats:
            repeats.append(n)
        seen.add(n)
    return repeats
