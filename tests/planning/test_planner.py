import logging

import pytest

from lane_coverage.domain.errors import NodeNotFound, Unreachable
from lane_coverage.domain.lane_graph import LaneGraph
from lane_coverage.io.planner_logging import PlannerLogging
from lane_coverage.io.recorder import MemorySink, Recorder
from lane_coverage.planning.external_solvers import LKHTourSolver
from lane_coverage.planning.planner import CoveragePlanner


class WrongLengthSolver:
    name = "broken"

    def solve(self, matrix, *, timeout_s=None):
        return [0, 1]


@pytest.fixture
def cycle() -> LaneGraph:
    return LaneGraph.from_edges([("A", "B", 1.0), ("B", "C", 1.0), ("C", "D", 1.0), ("D", "A", 1.0)])


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def hooks(sink: MemorySink) -> PlannerLogging:
    return PlannerLogging(
        run_id="t", logger=logging.getLogger("lane_coverage_tests"), recorder=Recorder(sink)
    )


@pytest.mark.parametrize("strategy", ["tsp", "dfs"])
def test_cycle_is_covered_by_both_strategies(cycle: LaneGraph, strategy: str):
    planner = CoveragePlanner(cycle, strategy=strategy)
    path = planner.plan("A", "D")
    assert path.nodes == ("A", "B", "C", "D")
    assert planner.verifier.cost(path) == 3.0


def test_plan_covers_every_node_and_respects_endpoints():
    g = LaneGraph.from_edges(
        [(1, 2), (2, 3), (3, 1), (3, 4), (4, 5), (5, 3), (2, 6), (6, 4), (5, 1)]
    )
    for strategy in ("tsp", "dfs"):
        path = CoveragePlanner(g, strategy=strategy).plan(1, 5)
        assert path.start == 1 and path.goal == 5
        assert path.covered() == {1, 2, 3, 4, 5, 6}
        for a, b in zip(path.nodes, path.nodes[1:]):
            assert g.edge_cost(a, b) is not None


def test_solver_failure_is_recorded_and_planning_continues(cycle, hooks, sink):
    planner = CoveragePlanner(cycle, solver=WrongLengthSolver(), hooks=hooks)
    path = planner.plan("A", "D")
    assert path.start == "A" and path.goal == "D"
    assert path.covered() == {"A", "B", "C", "D"}

    failed = sink.named("solver_failed")
    assert len(failed) == 1 and failed[0].solver == "broken"
    solved = sink.named("tour_solved")
    assert solved[0].fallback is True
    assert sink.named("plan_end")[0].cost == 3.0


def test_checkpoints_are_joined_without_duplicating_the_seam(cycle, hooks, sink):
    planner = CoveragePlanner(cycle, strategy="dfs", hooks=hooks)
    path = planner.plan_checkpoints(["A", "C", "B"])
    assert path.nodes == ("A", "B", "C", "D", "A", "B", "C", "D", "A", "B")
    looped = sink.named("route_looped")
    assert looped and looped[0].revisits == ["A", "B", "C", "D"]


def test_unreachable_goal_reports_plan_failed(hooks, sink):
    g = LaneGraph.from_edges([("A", "B"), ("B", "A")], lanes=["E"])
    planner = CoveragePlanner(g, hooks=hooks)
    with pytest.raises(Unreachable):
        planner.plan("A", "E")
    failed = sink.named("plan_failed")
    assert failed[0].kind == "Unreachable"
    assert not sink.named("plan_end")


def test_unknown_checkpoint(cycle, hooks, sink):
    with pytest.raises(NodeNotFound):
        CoveragePlanner(cycle, hooks=hooks).plan("A", "nowhere")
    assert sink.named("plan_failed")[0].kind == "NodeNotFound"


def test_unknown_strategy_fails_fast(cycle):
    with pytest.raises(ValueError):
        CoveragePlanner(cycle, strategy="bfs")


def test_loop_warning_can_be_disabled(cycle, sink):
    hooks = PlannerLogging(logger=logging.getLogger("lane_coverage_tests"), recorder=Recorder(sink))
    planner = CoveragePlanner(cycle, strategy="dfs", warn_on_loops=False, hooks=hooks)
    planner.plan_checkpoints(["A", "C", "B"])
    assert not sink.named("route_looped")


def test_unusable_scratch_dir_falls_back_and_is_recorded(cycle, hooks, sink, tmp_path):
    not_a_dir = tmp_path / "not_a_dir"
    not_a_dir.write_text("")
    solver = LKHTourSolver(scratch_dir=str(not_a_dir))
    path = CoveragePlanner(cycle, solver=solver, hooks=hooks).plan("A", "D")
    assert path.nodes == ("A", "B", "C", "D")
    assert sink.named("solver_failed")[0].solver == "lkh"
    assert not sink.named("plan_failed")
