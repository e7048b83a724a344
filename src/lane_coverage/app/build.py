# lane_coverage/app/build.py
from collections.abc import Mapping
from dataclasses import dataclass

from lane_coverage.app.hooks import NoopHooks, PlannerHooks
from lane_coverage.app.protocols import GraphAdapter, TourSolver
from lane_coverage.config.models import PlanningModel
from lane_coverage.domain.registry import NodeRegistry
from lane_coverage.io.planner_logging import PlannerLogging  # JSON logs
from lane_coverage.io.recorder import Recorder
from lane_coverage.planning.planner import CoveragePlanner
from lane_coverage.runtime.registries import make_tour_solver
from lane_coverage.runtime.resources import resolve_graph


@dataclass
class App:
    config: PlanningModel
    graph: GraphAdapter
    registry: NodeRegistry
    solver: TourSolver
    hooks: PlannerHooks
    planner: CoveragePlanner


def build(
    cfg: PlanningModel | Mapping | None = None,
    *,
    graph: GraphAdapter | None = None,
    use_logging: bool = True,
    recorder: Recorder | None = None,
    solver_deps: dict | None = None,
) -> App:
    # 0) Validate config
    if cfg is None:
        model = PlanningModel()
    else:
        model = cfg if isinstance(cfg, PlanningModel) else PlanningModel.model_validate(cfg)

    # 1) Graph: explicit object wins over the configured file
    if graph is None:
        if model.graph is None:
            raise ValueError("no graph given and none configured")
        graph = resolve_graph(model.graph)
        if graph is None:
            raise ValueError(f"graph file {model.graph.file!r} not available")
    registry = NodeRegistry.from_graph(graph)

    # 2) Hooks
    hooks = (
        PlannerLogging(
            run_id=model.run_id,
            level=model.log.level,
            debug=model.log.debug,
            recorder=recorder,
        )
        if use_logging
        else NoopHooks()
    )

    # 3) Solver & planner
    solver = make_tour_solver(model.planner.solver, deps=solver_deps)
    planner = CoveragePlanner(
        graph,
        registry=registry,
        solver=solver,
        strategy=model.planner.strategy,
        sentinel_cost=model.planner.matrix.sentinel_cost,
        timeout_s=getattr(model.planner.solver, "timeout_s", None),
        verify_cost=model.planner.verify_cost,
        warn_on_loops=model.planner.warn_on_loops,
        hooks=hooks,
    )
    return App(model, graph, registry, solver, hooks, planner)
