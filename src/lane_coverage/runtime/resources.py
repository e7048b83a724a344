# lane_coverage/runtime/resources.py
import json
import os
import pickle
from functools import lru_cache

import networkx as nx

from lane_coverage.config.models import GraphByPath
from lane_coverage.domain.lane_graph import LaneGraph


def _as_lane_graph(obj) -> LaneGraph:
    if isinstance(obj, LaneGraph):
        return obj
    if isinstance(obj, nx.DiGraph):
        return LaneGraph(obj)
    raise TypeError(f"expected LaneGraph or networkx.DiGraph, got {type(obj).__name__}")


@lru_cache(maxsize=8)
def load_graph_from_path(file: str, fmt: str) -> LaneGraph:
    if fmt == "pickle":
        with open(file, "rb") as f:
            return _as_lane_graph(pickle.load(f))
    if fmt == "graphml":
        return _as_lane_graph(nx.read_graphml(file, force_multigraph=False))
    if fmt == "json":
        with open(file, encoding="utf-8") as f:
            data = json.load(f)
        return _as_lane_graph(nx.node_link_graph(data, directed=True, multigraph=False))
    raise ValueError(f"Unsupported graph fmt {fmt!r}")


def resolve_graph(ref: GraphByPath) -> LaneGraph | None:
    if not os.path.exists(ref.file):
        if ref.must_exist:
            raise FileNotFoundError(ref.file)
        return None
    return load_graph_from_path(ref.file, ref.fmt)
