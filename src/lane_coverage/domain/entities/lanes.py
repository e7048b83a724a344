from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import Enum

from lane_coverage.domain.errors import SolverFailure

Node = Hashable
Tour = list[int]


class Relation(Enum):
    SUCCESSOR = "successor"
    LATERAL = "lateral"  # left/right lane change
    NONE = "none"

    @property
    def drivable(self) -> bool:
        return self is not Relation.NONE


@dataclass(frozen=True)
class FullPath:
    nodes: tuple[Node, ...]

    def __post_init__(self):
        if not self.nodes:
            raise ValueError("FullPath needs at least one node")

    @property
    def start(self) -> Node:
        return self.nodes[0]

    @property
    def goal(self) -> Node:
        return self.nodes[-1]

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __getitem__(self, i):
        return self.nodes[i]

    def covered(self) -> set[Node]:
        return set(self.nodes)


@dataclass
class TourResult:
    order: Tour
    failure: SolverFailure | None = None

    @property
    def fallback(self) -> bool:
        return self.failure is not None


@dataclass
class CostReport:
    total: float
    complete: bool = True
    broken_at: tuple[Node, Node] | None = None
    pairs_checked: int = field(default=0)
