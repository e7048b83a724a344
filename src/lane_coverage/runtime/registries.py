# runtime/registries.py
import time
from collections.abc import Callable
from typing import Any

from lane_coverage.app.protocols import TourSolver
from lane_coverage.config.models import (
    SolverConcordeModel,
    SolverLKHModel,
    SolverNearestNeighborModel,
    SolverUnion,
)
from lane_coverage.domain.entities.lanes import FullPath, Node
from lane_coverage.planning.external_solvers import ConcordeTourSolver, LKHTourSolver
from lane_coverage.planning.tour_solvers import NearestNeighborTwoOptSolver, solve_tour, tour_cost

SolverFactory = Callable[[SolverUnion, dict], TourSolver]
# (planner, start, goal, timeout_s) -> FullPath
Strategy = Callable[[Any, Node, Node, float | None], FullPath]

_solver_registry: dict[str, SolverFactory] = {}
_strategy_registry: dict[str, Strategy] = {}


# ------------------- Tour solvers ---------------------------


def register_solver(kind: str):
    def deco(fn: SolverFactory):
        _solver_registry[kind] = fn
        return fn

    return deco


def make_tour_solver(cfg: SolverUnion, *, deps: dict | None = None) -> TourSolver:
    try:
        factory = _solver_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown solver kind {cfg.kind!r}") from None
    return factory(cfg, deps or {})


@register_solver("nearest_neighbor")
def _make_nearest_neighbor(cfg: SolverNearestNeighborModel, deps):
    return NearestNeighborTwoOptSolver(starts=cfg.starts, max_passes=cfg.max_passes)


@register_solver("lkh")
def _make_lkh(cfg: SolverLKHModel, deps):
    return LKHTourSolver(
        cfg.binary,
        runs=cfg.runs,
        seed=cfg.seed,
        scratch_dir=cfg.scratch_dir,
        timeout_s=cfg.timeout_s,
        **{k: deps[k] for k in ("ids", "runner") if k in deps},
    )


@register_solver("concorde")
def _make_concorde(cfg: SolverConcordeModel, deps):
    return ConcordeTourSolver(
        cfg.binary,
        scratch_dir=cfg.scratch_dir,
        timeout_s=cfg.timeout_s,
        **{k: deps[k] for k in ("ids", "runner") if k in deps},
    )


# ------------------- Planning strategies ---------------------


def register_strategy(name: str):
    def deco(fn: Strategy):
        _strategy_registry[name] = fn
        return fn

    return deco


def get_strategy(name: str) -> Strategy:
    try:
        return _strategy_registry[name]
    except KeyError:
        raise ValueError(f"Unknown planning strategy {name!r}") from None


def strategies() -> list[str]:
    return sorted(_strategy_registry)


@register_strategy("tsp")
def _plan_tsp(planner, start, goal, timeout_s):
    t0 = time.perf_counter()
    matrix = planner.matrix_builder.build(planner.graph, planner.registry)
    planner.hooks.matrix_built(
        dimension=matrix.dimension, ms=(time.perf_counter() - t0) * 1000
    )

    t1 = time.perf_counter()
    result = solve_tour(planner.solver, matrix.costs, timeout_s=timeout_s)
    if result.failure is not None:
        planner.hooks.solver_failed(solver=planner.solver.name, reason=str(result.failure))
    planner.hooks.tour_solved(
        solver=planner.solver.name,
        dimension=matrix.dimension,
        cost=tour_cost(matrix.costs, result.order),
        ms=(time.perf_counter() - t1) * 1000,
        fallback=result.fallback,
    )
    return planner.stitcher.expand(result.order, start, goal)


@register_strategy("dfs")
def _plan_dfs(planner, start, goal, timeout_s):
    return planner.explorer.explore(start, goal)
