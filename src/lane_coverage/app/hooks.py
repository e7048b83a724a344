# app/hooks.py
from typing import Protocol


class PlannerHooks(Protocol):
    def plan_start(self, *, strategy, start, goal): ...
    def matrix_built(self, *, dimension, ms): ...
    def tour_solved(self, *, solver, dimension, cost, ms, fallback): ...
    def solver_failed(self, *, solver, reason): ...
    def cost_mismatch(self, *, source, target, partial): ...
    def route_looped(self, *, revisits): ...
    def plan_end(self, *, strategy, length, cost, ms): ...
    def plan_failed(self, *, strategy, exc: BaseException): ...


class NoopHooks:
    def plan_start(self, **_):
        pass

    def matrix_built(self, **_):
        pass

    def tour_solved(self, **_):
        pass

    def solver_failed(self, **_):
        pass

    def cost_mismatch(self, **_):
        pass

    def route_looped(self, **_):
        pass

    def plan_end(self, **_):
        pass

    def plan_failed(self, **_):
        pass
