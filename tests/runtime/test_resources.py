import json
import pickle

import networkx as nx
import pytest

from lane_coverage.config.models import GraphByPath
from lane_coverage.domain.entities.lanes import Relation
from lane_coverage.domain.lane_graph import LaneGraph
from lane_coverage.runtime.resources import load_graph_from_path, resolve_graph


@pytest.fixture
def digraph() -> nx.DiGraph:
    G = nx.DiGraph()
    G.add_edge("a", "b", cost=2.0, relation="successor")
    G.add_edge("b", "c", cost=1.0, relation="lateral")
    G.add_edge("c", "a", cost=1.5, relation="successor")
    G.add_node("x", passable=False)
    return G


def _check(g: LaneGraph):
    assert g.node_ids() == {"a", "b", "c"}
    assert g.edge_cost("a", "b") == 2.0
    assert g.relation("b", "c") is Relation.LATERAL
    assert g.shortest_path("a", "c") == ["a", "b", "c"]


def test_json_node_link(tmp_path, digraph):
    f = tmp_path / "lanes.json"
    f.write_text(json.dumps(nx.node_link_data(digraph)))
    _check(resolve_graph(GraphByPath(file=str(f), fmt="json")))


def test_graphml(tmp_path, digraph):
    f = tmp_path / "lanes.graphml"
    nx.write_graphml(digraph, f)
    _check(resolve_graph(GraphByPath(file=str(f), fmt="graphml")))


def test_pickled_lane_graph_keeps_its_view(tmp_path, digraph):
    f = tmp_path / "lanes.pkl"
    f.write_bytes(pickle.dumps(LaneGraph(digraph)))
    g = load_graph_from_path(str(f), "pickle")
    _check(g)
    assert "x" not in g


def test_pickled_plain_digraph_is_wrapped(tmp_path, digraph):
    f = tmp_path / "raw.pkl"
    f.write_bytes(pickle.dumps(digraph))
    _check(load_graph_from_path(str(f), "pickle"))


def test_pickle_of_something_else_is_rejected(tmp_path):
    f = tmp_path / "junk.pkl"
    f.write_bytes(pickle.dumps({"not": "a graph"}))
    with pytest.raises(TypeError):
        load_graph_from_path(str(f), "pickle")


def test_unsupported_format(tmp_path):
    f = tmp_path / "lanes.osm"
    f.write_text("")
    with pytest.raises(ValueError):
        load_graph_from_path(str(f), "osm")


def test_missing_file(tmp_path):
    missing = str(tmp_path / "nope.json")
    with pytest.raises(FileNotFoundError):
        resolve_graph(GraphByPath(file=missing))
    assert resolve_graph(GraphByPath(file=missing, must_exist=False)) is None
