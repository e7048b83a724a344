# app/events.py
from dataclasses import dataclass
from typing import Any


# Base type for diagnostic events (recorded, never acted upon)
@dataclass
class PlanEvent:
    run_id: str
    name: str  # stable event name


@dataclass
class PlanStarted(PlanEvent):
    strategy: str
    start: Any
    goal: Any


@dataclass
class TourSolved(PlanEvent):
    solver: str
    dimension: int
    cost: float
    fallback: bool


@dataclass
class SolverFailed(PlanEvent):
    solver: str
    reason: str


@dataclass
class CostMismatch(PlanEvent):
    source: Any
    target: Any
    partial: float


@dataclass
class RouteLooped(PlanEvent):
    revisits: list


@dataclass
class PlanCompleted(PlanEvent):
    strategy: str
    length: int
    cost: float | None


@dataclass
class PlanFailed(PlanEvent):
    strategy: str
    error: str
    kind: str
