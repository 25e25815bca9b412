"""CLI startup entrypoint for the colony distributor."""

from __future__ import annotations

import logging
from dataclasses import asdict

import typer
from rich import print
from rich.logging import RichHandler

from colony_distributor.balancing import WorkloadBalancer
from colony_distributor.config import settings
from colony_distributor.history import AssignmentHistoryStore, InMemoryHistoryStore, JsonlHistoryStore
from colony_distributor.models import TaskCategory
from colony_distributor.scenario import Scenario, ScenarioError, build_distributor, demo_scenario, load_scenario
from colony_distributor.stats import WorkloadStats
from colony_distributor.telemetry import LoggingTelemetry

app = typer.Typer(help="Colony distributor entrypoint")


@app.callback()
def configure_logging(
    log_level: str = typer.Option(None, help="Override COLONY_DISTRIBUTOR_LOG_LEVEL"),
) -> None:
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load(scenario_file: str | None) -> Scenario:
    path = scenario_file or settings.scenario_path
    if not path:
        return demo_scenario()
    try:
        return load_scenario(path)
    except ScenarioError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)


def _build_history_store() -> AssignmentHistoryStore:
    if settings.history_path:
        return JsonlHistoryStore(settings.history_path)
    return InMemoryHistoryStore(max_records=settings.history_max_records)


def _parse_counts(raw_counts: list[str]) -> WorkloadStats:
    stats = WorkloadStats()
    for item in raw_counts:
        name, sep, value = item.partition("=")
        try:
            category = TaskCategory(name.strip())
            count = int(value) if sep else -1
        except ValueError as exc:
            raise typer.BadParameter(f"Expected category=count, got {item!r}") from exc
        if count < 0:
            raise typer.BadParameter(f"Expected category=count, got {item!r}")
        for _ in range(count):
            stats.increment(category)
    return stats


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "log_level": settings.log_level,
            "priority_matrix": {
                category.value: config.model_dump() for category, config in settings.priority_matrix.items()
            },
            "ideal_distribution": {category.value: share for category, share in settings.ideal_distribution.items()},
            "max_assignment_distance": settings.max_assignment_distance,
            "reassign_on_complete": settings.reassign_on_complete,
            "strict_aggregation": settings.strict_aggregation,
            "history_path": settings.history_path,
        }
    )


@app.command()
def distribute(
    scenario_file: str = typer.Option(None, "--scenario", help="Path to a JSON colony scenario"),
    cycles: int = typer.Option(1, min=1, help="How many distribution cycles to run"),
    tick: float = typer.Option(1.0, min=0.0, help="Simulated seconds between cycles"),
) -> None:
    """Run distribution cycles against a simulated colony."""
    scenario = _load(scenario_file)
    distributor = build_distributor(
        scenario,
        settings,
        history_store=_build_history_store(),
        telemetry=LoggingTelemetry(),
    )

    for _ in range(cycles):
        cycle = distributor.run_cycle()
        print(
            {
                "cycle_id": cycle.cycle_id,
                "free_colonists": cycle.free_colonists,
                "tasks": cycle.task_count,
                "aggregation": cycle.aggregation_status.value,
                "assignments": [
                    {"colonist": colonist_id, "category": category.value, "task": task_id}
                    for colonist_id, category, task_id in cycle.assignments
                ],
                "unassigned": cycle.unassigned,
            }
        )
        scenario.advance(tick)
        distributor.process_completions()

    print(
        {
            "workload": {category.value: count for category, count in distributor.workload_stats.snapshot().items()},
            "completions": {
                category.value: values for category, values in distributor.completion_stats.snapshot().items()
            },
            "balancing": [asdict(action) for action in distributor.balance_workload()],
        }
    )


@app.command()
def balance(
    count: list[str] = typer.Option([], "--count", help="Assignment count as category=N, repeatable"),
) -> None:
    """Show balancing actions for the given counts against the ideal distribution."""
    stats = _parse_counts(count)
    balancer = WorkloadBalancer(settings.ideal_distribution, tolerance=settings.balance_tolerance)
    actions = balancer.balance(stats)
    print(
        {
            "current": {category.value: value for category, value in stats.snapshot().items()},
            "actions": [
                {"category": action.category.value, "kind": action.kind.value, "amount": round(action.amount, 6)}
                for action in actions
            ],
        }
    )


@app.command("resource-need")
def resource_need(
    scenario_file: str = typer.Option(None, "--scenario", help="Path to a JSON colony scenario"),
) -> None:
    """Show colony resource need and per-category priority multipliers."""
    scenario = _load(scenario_file)
    distributor = build_distributor(scenario, settings)
    print(
        {
            "resource_need": distributor.calculate_resource_need(),
            "multipliers": {category.value: distributor.colony_need_multiplier(category) for category in TaskCategory},
        }
    )


@app.command()
def history(
    history_file: str = typer.Option(None, help="Path to JSONL assignment history"),
    limit: int = typer.Option(20, min=1, help="How many records to show"),
) -> None:
    """Show the most recent assignment history records."""
    path = history_file or settings.history_path
    if not path:
        raise typer.BadParameter("Provide --history-file or set COLONY_DISTRIBUTOR_HISTORY_PATH")

    records = JsonlHistoryStore(path).list_recent(limit)
    print(
        [
            {
                "colonist": record.colonist_id,
                "category": record.category.value,
                "task": record.task_id,
                "status": record.status.value,
                "recorded_at": record.recorded_at.isoformat(),
                "error": record.error,
            }
            for record in records
        ]
    )


if __name__ == "__main__":
    app()
