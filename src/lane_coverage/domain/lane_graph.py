from collections.abc import Iterable

import networkx as nx

from lane_coverage.domain.entities.lanes import Node, Relation

EdgeSpec = tuple[Node, Node] | tuple[Node, Node, float] | tuple[Node, Node, float, str | Relation]


def _relation(value) -> Relation:
    return value if isinstance(value, Relation) else Relation(str(value).lower())


class LaneGraph:
    """
    networkx-backed lane graph.

    Nodes carry an optional ``passable`` flag (default True); edges carry ``cost``
    (default 1.0) and ``relation`` ("successor" or "lateral"). Only passable nodes
    and drivable edges take part in queries.
    """

    def __init__(self, graph: nx.DiGraph | None = None):
        self.G = nx.DiGraph()
        if graph is not None:
            for n, data in graph.nodes(data=True):
                self.add_lane(n, passable=bool(data.get("passable", True)))
            for u, v, data in graph.edges(data=True):
                self.add_edge(
                    u, v, float(data.get("cost", 1.0)), data.get("relation", Relation.SUCCESSOR)
                )
        self._view = self._passable_view()

    def _passable_view(self):
        return nx.subgraph_view(
            self.G,
            filter_node=lambda n: self.G.nodes[n]["passable"],
            filter_edge=lambda u, v: self.G.edges[u, v]["relation"].drivable,
        )

    # views hold closures; pickle the raw graph only
    def __getstate__(self):
        return {"G": self.G}

    def __setstate__(self, state):
        self.G = state["G"]
        self._view = self._passable_view()

    @classmethod
    def from_edges(
        cls, edges: Iterable[EdgeSpec], *, lanes: Iterable[Node] = (), blocked: Iterable[Node] = ()
    ) -> "LaneGraph":
        g = cls()
        for n in lanes:
            g.add_lane(n)
        for e in edges:
            u, v, *rest = e
            cost = float(rest[0]) if rest else 1.0
            rel = rest[1] if len(rest) > 1 else Relation.SUCCESSOR
            g.add_edge(u, v, cost, rel)
        for n in blocked:
            g.add_lane(n, passable=False)
        return g

    # ---------------- mutation (graph loading only) -----------------

    def add_lane(self, node: Node, *, passable: bool = True) -> None:
        self.G.add_node(node, passable=passable)

    def add_edge(
        self, u: Node, v: Node, cost: float = 1.0, relation: str | Relation = Relation.SUCCESSOR
    ) -> None:
        if cost < 0:
            raise ValueError(f"edge {u!r}->{v!r} has negative cost {cost}")
        for n in (u, v):
            if n not in self.G:
                self.add_lane(n)
        self.G.add_edge(u, v, cost=float(cost), relation=_relation(relation))

    # ---------------- GraphAdapter ----------------------------------

    def node_ids(self) -> set[Node]:
        return set(self._view.nodes)

    def edge_cost(self, a: Node, b: Node) -> float | None:
        if not self._view.has_edge(a, b):
            return None
        return self._view.edges[a, b]["cost"]

    def relation(self, a: Node, b: Node) -> Relation:
        if not self._view.has_edge(a, b):
            return Relation.NONE
        return self._view.edges[a, b]["relation"]

    def successors(self, a: Node) -> list[Node]:
        if a not in self._view:
            return []
        return [b for b in self._view.successors(a) if self.relation(a, b) is Relation.SUCCESSOR]

    def shortest_path(self, a: Node, b: Node) -> list[Node] | None:
        if a not in self._view or b not in self._view:
            return None
        try:
            return nx.dijkstra_path(self._view, a, b, weight="cost")
        except nx.NetworkXNoPath:
            return None

    def path_costs_from(self, a: Node) -> dict[Node, float]:
        if a not in self._view:
            return {}
        return nx.single_source_dijkstra_path_length(self._view, a, weight="cost")

    def __contains__(self, node: Node) -> bool:
        return node in self._view

    def __len__(self) -> int:
        return self._view.number_of_nodes()
