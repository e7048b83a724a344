import argparse
import json
import sys

from lane_coverage.app.build import build
from lane_coverage.config.models import GraphByPath, PlanningModel
from lane_coverage.domain.errors import PlanningError
from lane_coverage.io.planner_logging import default_json_logger
from lane_coverage.runtime.registries import strategies
from lane_coverage.runtime.resources import resolve_graph


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lane-coverage", description="Plan a route that covers every passable lane."
    )
    p.add_argument("--graph", required=True, help="lane graph file")
    p.add_argument("--fmt", choices=["json", "graphml", "pickle"], default="json")
    p.add_argument("--start", required=True, help="start lane id")
    p.add_argument("--goal", required=True, help="goal lane id")
    p.add_argument("--via", action="append", default=[], help="intermediate checkpoint (repeatable)")
    p.add_argument("--strategy", choices=strategies(), default=None)
    p.add_argument("--config", help="PlanningModel as JSON")
    p.add_argument("--timeout", type=float, default=None, help="solver timeout in seconds")
    return p


def _lookup(ids, raw: str):
    """Match a command-line id against graph ids by string form."""
    by_str = {str(n): n for n in ids}
    if raw not in by_str:
        raise SystemExit(f"unknown lane id {raw!r}")
    return by_str[raw]


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)

    if args.config:
        with open(args.config, encoding="utf-8") as f:
            model = PlanningModel.model_validate(json.load(f))
    else:
        model = PlanningModel()
    # logs go to stderr so stdout carries only the route
    default_json_logger(level=model.log.level, stream=sys.stderr)

    try:
        graph = resolve_graph(GraphByPath(file=args.graph, fmt=args.fmt))
    except FileNotFoundError:
        raise SystemExit(f"graph file not found: {args.graph!r}") from None
    app = build(model, graph=graph)

    ids = graph.node_ids()
    checkpoints = [_lookup(ids, x) for x in (args.start, *args.via, args.goal)]
    try:
        path = app.planner.plan_checkpoints(
            checkpoints, strategy=args.strategy, timeout_s=args.timeout
        )
    except PlanningError as exc:
        print(f"no route found: {exc}", file=sys.stderr)
        return 1

    report = app.planner.verifier.verify(path)
    json.dump(
        {"path": list(path), "cost": report.total, "complete": report.complete},
        sys.stdout,
        default=str,
    )
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
