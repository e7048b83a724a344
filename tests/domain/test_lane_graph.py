import networkx as nx
import pytest

from lane_coverage.app.protocols import GraphAdapter, SupportsPathCosts
from lane_coverage.domain.entities.lanes import Relation
from lane_coverage.domain.lane_graph import LaneGraph


@pytest.fixture
def graph() -> LaneGraph:
    # A -> B -> C with a lateral shortcut A ~ C and a blocked lane X
    return LaneGraph.from_edges(
        [("A", "B", 1.0), ("B", "C", 1.0), ("A", "C", 5.0, "lateral"), ("C", "X", 1.0)],
        blocked=["X"],
    )


def test_lane_graph_satisfies_adapter_protocols(graph: LaneGraph):
    assert isinstance(graph, GraphAdapter)
    assert isinstance(graph, SupportsPathCosts)


def test_blocked_lanes_are_not_passable(graph: LaneGraph):
    assert graph.node_ids() == {"A", "B", "C"}
    assert "X" not in graph
    assert graph.edge_cost("C", "X") is None
    assert graph.shortest_path("A", "X") is None


def test_relations_and_successors(graph: LaneGraph):
    assert graph.relation("A", "B") is Relation.SUCCESSOR
    assert graph.relation("A", "C") is Relation.LATERAL
    assert graph.relation("B", "A") is Relation.NONE
    # lateral edges are drivable but are not "following" lanes
    assert graph.successors("A") == ["B"]
    assert graph.successors("nope") == []


def test_shortest_path_prefers_cheaper_chain(graph: LaneGraph):
    assert graph.shortest_path("A", "C") == ["A", "B", "C"]
    assert graph.shortest_path("C", "A") is None
    assert graph.shortest_path("B", "B") == ["B"]
    assert graph.path_costs_from("A") == {"A": 0.0, "B": 1.0, "C": 2.0}


def test_negative_cost_rejected():
    g = LaneGraph()
    with pytest.raises(ValueError):
        g.add_edge(1, 2, -1.0)


def test_wraps_plain_networkx_digraph():
    G = nx.DiGraph()
    G.add_edge(1, 2, cost=2.5)
    G.add_edge(2, 3, cost=1.0, relation="LATERAL")
    G.add_node(4, passable=False)
    g = LaneGraph(G)
    assert g.node_ids() == {1, 2, 3}
    assert g.edge_cost(1, 2) == 2.5
    assert g.relation(2, 3) is Relation.LATERAL
