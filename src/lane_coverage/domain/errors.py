# lane_coverage/domain/errors.py


class PlanningError(Exception):
    """Base for every failure the planner reports to its caller."""


class GraphInconsistency(PlanningError):
    pass


class InvalidTour(PlanningError):
    pass


class NodeNotFound(InvalidTour):
    def __init__(self, node, where: str = "graph"):
        super().__init__(f"node {node!r} not found in {where}")
        self.node = node


class Unreachable(PlanningError):
    def __init__(self, source, target):
        super().__init__(f"no path from {source!r} to {target!r}")
        self.source, self.target = source, target


class SolverFailure(PlanningError):
    """Raised by tour solvers; recovered by ``solve_tour`` with the identity order."""
