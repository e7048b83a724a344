# lane_coverage/domain/registry.py
from collections.abc import Iterable

from lane_coverage.domain.entities.lanes import Node
from lane_coverage.domain.errors import NodeNotFound


def _stable_order(ids: Iterable[Node]) -> list[Node]:
    ids = list(ids)
    try:
        return sorted(ids)
    except TypeError:
        # mixed id types; repr gives a portable total order
        return sorted(ids, key=repr)


class NodeRegistry:
    """
    Ordinal arena over the passable nodes of a graph.
    Ordinals are dense (0..N-1) and stable for the lifetime of the registry;
    ordinal N is reserved for the matrix sentinel and never maps to a node.
    """

    def __init__(self, ids: Iterable[Node]):
        self._by_ordinal: list[Node] = _stable_order(ids)
        self._by_id: dict[Node, int] = {n: i for i, n in enumerate(self._by_ordinal)}

    @classmethod
    def from_graph(cls, graph) -> "NodeRegistry":
        return cls(graph.node_ids())

    def __len__(self) -> int:
        return len(self._by_ordinal)

    def __contains__(self, node: Node) -> bool:
        return node in self._by_id

    @property
    def sentinel(self) -> int:
        return len(self._by_ordinal)

    def ordinal(self, node: Node) -> int:
        try:
            return self._by_id[node]
        except KeyError:
            raise NodeNotFound(node, "registry") from None

    def node(self, ordinal: int) -> Node:
        if not 0 <= ordinal < len(self._by_ordinal):
            raise IndexError(f"ordinal {ordinal} out of range (N={len(self)})")
        return self._by_ordinal[ordinal]

    def nodes(self) -> list[Node]:
        return list(self._by_ordinal)
