import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False


class MatrixModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    sentinel_cost: float = 1_000_000.0

    @field_validator("sentinel_cost")
    @classmethod
    def _positive(cls, v: float) -> float:
        if not v > 0:
            raise ValueError("sentinel_cost must be > 0")
        return v


# ----------------- TOUR SOLVERS ---------------------


class SolverNearestNeighborModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["nearest_neighbor"] = "nearest_neighbor"
    starts: int = Field(default=8, ge=1)  # construction restarts
    max_passes: int = Field(default=50, ge=0)  # 2-opt sweeps


class _ExternalSolverModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    binary: str
    scratch_dir: str | None = None  # None => system temp dir
    timeout_s: float = 60.0

    @field_validator("scratch_dir")
    @classmethod
    def _expand(cls, v: str | None) -> str | None:
        return None if v is None else os.path.expandvars(os.path.expanduser(v))

    @field_validator("timeout_s")
    def _positive_timeout(cls, v: float, info: ValidationInfo) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v


class SolverLKHModel(_ExternalSolverModel):
    kind: Literal["lkh"] = "lkh"
    binary: str = "LKH"
    runs: int = Field(default=1, ge=1)
    seed: int | None = None


class SolverConcordeModel(_ExternalSolverModel):
    kind: Literal["concorde"] = "concorde"
    binary: str = "concorde"


SolverUnion = Annotated[
    SolverNearestNeighborModel | SolverLKHModel | SolverConcordeModel,
    Field(discriminator="kind"),
]


# ----------------- GRAPH ---------------------


class GraphByPath(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["path"] = "path"
    file: str
    fmt: Literal["pickle", "graphml", "json"] = "json"
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


# ------------------------------------------------------------------


class PlannerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    strategy: Literal["tsp", "dfs"] = "tsp"
    solver: SolverUnion = Field(default_factory=SolverNearestNeighborModel)
    matrix: MatrixModel = Field(default_factory=MatrixModel)
    verify_cost: bool = True
    warn_on_loops: bool = True


class PlanningModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "lane_coverage"
    run_id: str = "local"
    log: LogModel = LogModel()
    planner: PlannerModel = Field(default_factory=PlannerModel)
    graph: GraphByPath | None = None
