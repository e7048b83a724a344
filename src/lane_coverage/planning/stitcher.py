from collections.abc import Sequence

from lane_coverage.app.protocols import GraphAdapter
from lane_coverage.domain.entities.lanes import FullPath, Node, Tour
from lane_coverage.domain.errors import InvalidTour, NodeNotFound, Unreachable
from lane_coverage.domain.registry import NodeRegistry


def rotate_to(order: Sequence[int], first: int) -> Tour:
    """Rotate a cyclic order so that ``first`` leads. Idempotent."""
    order = list(order)
    try:
        k = order.index(first)
    except ValueError:
        raise NodeNotFound(first, "tour") from None
    return order[k:] + order[:k]


def splice(walk: list[Node], connector: Sequence[Node] | None, target: Node) -> None:
    """Append ``connector`` to ``walk``, skipping its first node (already the tail)."""
    if not connector:
        raise Unreachable(walk[-1], target)
    if connector[0] != walk[-1] or connector[-1] != target:
        raise Unreachable(walk[-1], target)
    walk.extend(connector[1:])


class PathStitcher:
    """Turns a visiting order into a continuous lane-level walk."""

    def __init__(self, graph: GraphAdapter, registry: NodeRegistry):
        self.G, self.registry = graph, registry

    def expand(self, order: Sequence[int], start: Node, goal: Node) -> FullPath:
        real = [o for o in order if o != self.registry.sentinel]
        if len(real) != len(set(real)):
            raise InvalidTour("tour visits an ordinal more than once")
        if start not in self.registry or self.registry.ordinal(start) not in real:
            raise NodeNotFound(start, "tour")
        lanes = [self.registry.node(o) for o in rotate_to(real, self.registry.ordinal(start))]

        walk = [lanes[0]]
        for nxt in lanes[1:]:
            self.connect(walk, nxt)
        self.connect(walk, goal)
        return FullPath(tuple(walk))

    def connect(self, walk: list[Node], target: Node) -> None:
        splice(walk, self.G.shortest_path(walk[-1], target), target)
