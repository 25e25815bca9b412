"""Colony scenarios: simulated collaborators loaded from JSON or built-in demo data."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from colony_distributor.adapters.simulated import (
    SimulatedColonist,
    StaticResourceTracker,
    StaticTaskProvider,
    StraightLinePathfinder,
)
from colony_distributor.config import Settings
from colony_distributor.distributor import ColonistDistributor
from colony_distributor.history import AssignmentHistoryStore
from colony_distributor.matching import ExperienceSuitability
from colony_distributor.models import Task, TaskCategory
from colony_distributor.telemetry import Telemetry


class ScenarioError(ValueError):
    """Raised when a scenario payload is malformed."""


@dataclass(slots=True)
class Scenario:
    colonists: list[SimulatedColonist]
    providers: dict[TaskCategory, StaticTaskProvider]
    resources: StaticResourceTracker
    pathfinder: StraightLinePathfinder = field(default_factory=StraightLinePathfinder)

    def advance(self, seconds: float) -> int:
        """Advance every colonist's task timer; returns how many finished."""
        return sum(1 for colonist in self.colonists if colonist.advance(seconds))


def _position(raw: Any, label: str) -> tuple[float, float]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ScenarioError(f"{label} must be a [x, y] pair, got {raw!r}")
    try:
        return float(raw[0]), float(raw[1])
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"{label} must hold numbers, got {raw!r}") from exc


def _category(raw: Any) -> TaskCategory:
    try:
        return TaskCategory(raw)
    except ValueError as exc:
        raise ScenarioError(f"Unknown task category: {raw!r}") from exc


def _parse_task(category: TaskCategory, raw: dict[str, Any], index: int) -> Task:
    label = f"tasks.{category.value}[{index}]"
    try:
        position = _position(raw["position"], f"{label}.position")
        target = _position(raw.get("target", raw["position"]), f"{label}.target")
        task = Task(
            category=category,
            position=position,
            target=target,
            estimated_duration=float(raw["duration"]),
            experience_gain=float(raw.get("experience_gain", 1.0)),
            available=bool(raw.get("available", True)),
            attributes=dict(raw.get("attributes", {})),
            required_experience=float(raw.get("required_experience", 0.0)),
        )
    except ScenarioError:
        raise
    except KeyError as exc:
        raise ScenarioError(f"{label} is missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"{label} is invalid: {exc}") from exc
    if "id" in raw:
        task.task_id = str(raw["id"])
    return task


def _parse_colonist(raw: dict[str, Any], index: int) -> SimulatedColonist:
    if not isinstance(raw, dict) or "id" not in raw:
        raise ScenarioError(f"colonists[{index}] is missing field 'id'")
    try:
        experience = {
            _category(name): float(value) for name, value in dict(raw.get("experience", {})).items()
        }
    except ScenarioError:
        raise
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"colonists[{index}].experience is invalid: {exc}") from exc
    return SimulatedColonist(
        colonist_id=str(raw["id"]),
        position=_position(raw.get("position", [0, 0]), f"colonists[{index}].position"),
        experience=experience,
    )


def _mapping(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ScenarioError(f"{key} must be a JSON object")
    return value


def _levels(resources: dict[str, Any], key: str) -> dict[str, float]:
    levels = _mapping(resources, key)
    try:
        return {str(name): float(level) for name, level in levels.items()}
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"resources.{key} levels must be numbers: {exc}") from exc


def parse_scenario(payload: dict[str, Any]) -> Scenario:
    if not isinstance(payload, dict):
        raise ScenarioError("Scenario must be a JSON object")

    raw_colonists = payload.get("colonists", [])
    if not isinstance(raw_colonists, list):
        raise ScenarioError("colonists must be a list")
    colonists = [_parse_colonist(raw, index) for index, raw in enumerate(raw_colonists)]

    providers: dict[TaskCategory, StaticTaskProvider] = {}
    for name, raw_tasks in _mapping(payload, "tasks").items():
        category = _category(name)
        if not isinstance(raw_tasks, list):
            raise ScenarioError(f"tasks.{name} must be a list")
        providers[category] = StaticTaskProvider(
            [_parse_task(category, raw, index) for index, raw in enumerate(raw_tasks)]
        )

    resources = _mapping(payload, "resources")
    tracker = StaticResourceTracker(current=_levels(resources, "current"), target=_levels(resources, "target"))
    try:
        step = float(payload.get("path_step", 1.0))
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"path_step must be a number: {exc}") from exc
    if not step > 0:
        raise ScenarioError("path_step must be positive")
    return Scenario(
        colonists=colonists,
        providers=providers,
        resources=tracker,
        pathfinder=StraightLinePathfinder(step=step),
    )


def load_scenario(path: str | Path) -> Scenario:
    scenario_path = Path(path)
    if not scenario_path.exists():
        raise ScenarioError(f"Scenario file does not exist: {scenario_path}")
    try:
        payload = json.loads(scenario_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ScenarioError(f"Scenario file is not valid JSON: {exc}") from exc
    return parse_scenario(payload)


DEMO_SCENARIO: dict[str, Any] = {
    "colonists": [
        {"id": "ada", "position": [0, 0], "experience": {"research": 5}},
        {"id": "bo", "position": [4, 2]},
        {"id": "cy", "position": [-3, 5], "experience": {"maintenance": 2}},
    ],
    "tasks": {
        "mining": [
            {
                "id": "ore-vein",
                "position": [10, 0],
                "target": [2, 0],
                "duration": 3,
                "experience_gain": 2,
                "attributes": {"resource_scarcity": 3, "difficulty": 2},
            },
        ],
        "building": [
            {
                "id": "habitat-dome",
                "position": [0, 6],
                "target": [0, 6],
                "duration": 4,
                "experience_gain": 3,
                "attributes": {"urgency": 2, "complexity": 4},
            },
        ],
        "maintenance": [
            {
                "id": "oxygen-scrubber",
                "position": [1, 1],
                "duration": 2,
                "experience_gain": 1,
                "attributes": {"critical_level": 3, "efficiency": 0.5},
            },
        ],
        "research": [
            {
                "id": "soil-analysis",
                "position": [2, 2],
                "duration": 5,
                "experience_gain": 4,
                "required_experience": 3,
                "attributes": {"novelty": 2, "complexity": 1},
            },
        ],
    },
    "resources": {
        "current": {"ore": 20, "minerals": 45, "materials": 30, "power": 80, "oxygen": 60},
        "target": {"ore": 50, "minerals": 50, "materials": 40, "power": 100, "oxygen": 100},
    },
}


def demo_scenario() -> Scenario:
    return parse_scenario(DEMO_SCENARIO)


def build_distributor(
    scenario: Scenario,
    settings: Settings,
    *,
    history_store: AssignmentHistoryStore | None = None,
    telemetry: Telemetry | None = None,
) -> ColonistDistributor:
    return ColonistDistributor(
        colonists=scenario.colonists,
        providers=scenario.providers,
        pathfinder=scenario.pathfinder,
        resources=scenario.resources,
        priority_matrix=settings.build_priority_matrix(),
        ideal_distribution=settings.ideal_distribution,
        category_resources=settings.category_resources,
        suitability=ExperienceSuitability(max_distance=settings.max_assignment_distance),
        history_store=history_store,
        telemetry=telemetry,
        reassign_on_complete=settings.reassign_on_complete,
        strict_aggregation=settings.strict_aggregation,
        balance_tolerance=settings.balance_tolerance,
    )
