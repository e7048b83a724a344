# io/planner_logging.py
import json
import logging
import sys

from lane_coverage.app.events import (
    CostMismatch,
    PlanCompleted,
    PlanFailed,
    PlanStarted,
    RouteLooped,
    SolverFailed,
    TourSolved,
)
from lane_coverage.app.hooks import NoopHooks
from lane_coverage.io.recorder import Recorder


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(payload, default=str)


def default_json_logger(name="lane_coverage", level="INFO", stream=None):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(stream or sys.stdout)
        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


class PlannerLogging(NoopHooks):
    """
    One place to shape and emit structured logs for a planning run.
    Warnings (solver fallback, cost mismatch, loops) are also forwarded to the
    recorder as diagnostic events.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
        recorder: Recorder | None = None,
    ):
        self.run_id, self.debug, self.recorder = run_id, debug, recorder
        self.log = logger or default_json_logger(level=level)

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        self.log.log(getattr(logging, level), msg, extra={"extra": {"run_id": self.run_id, **extra}})

    def _record(self, cls, name: str, **fields):
        if self.recorder:
            self.recorder.emit(cls(run_id=self.run_id, name=name, **fields))

    # --------------------------------------------------------

    def plan_start(self, *, strategy, start, goal):
        self._emit("INFO", "plan_start", strategy=strategy, start=start, goal=goal)
        self._record(PlanStarted, "plan_start", strategy=strategy, start=start, goal=goal)

    def matrix_built(self, *, dimension, ms):
        if self.debug:
            self._emit("DEBUG", "matrix_built", dimension=dimension, ms=round(ms, 3))

    def tour_solved(self, *, solver, dimension, cost, ms, fallback):
        self._emit(
            "INFO",
            "tour_solved",
            solver=solver,
            dimension=dimension,
            cost=cost,
            ms=round(ms, 3),
            fallback=fallback,
        )
        self._record(
            TourSolved, "tour_solved", solver=solver, dimension=dimension, cost=cost, fallback=fallback
        )

    def solver_failed(self, *, solver, reason):
        self._emit("WARNING", "solver_failed", solver=solver, reason=reason, fallback="identity")
        self._record(SolverFailed, "solver_failed", solver=solver, reason=reason)

    def cost_mismatch(self, *, source, target, partial):
        self._emit("WARNING", "cost_mismatch", source=source, target=target, partial=partial)
        self._record(CostMismatch, "cost_mismatch", source=source, target=target, partial=partial)

    def route_looped(self, *, revisits):
        self._emit("WARNING", "route_looped", revisits=len(revisits))
        self._record(RouteLooped, "route_looped", revisits=list(revisits))

    def plan_end(self, *, strategy, length, cost, ms):
        self._emit("INFO", "plan_end", strategy=strategy, length=length, cost=cost, ms=round(ms, 3))
        self._record(PlanCompleted, "plan_end", strategy=strategy, length=length, cost=cost)

    def plan_failed(self, *, strategy, exc: BaseException):
        kind = type(exc).__name__
        self._emit("ERROR", "plan_failed", strategy=strategy, kind=kind, error=str(exc))
        self._record(PlanFailed, "plan_failed", strategy=strategy, error=str(exc), kind=kind)
