from __future__ import annotations

import json
from pathlib import Path

import pytest

from colony_distributor.config import Settings
from colony_distributor.models import TaskCategory
from colony_distributor.scenario import ScenarioError, build_distributor, demo_scenario, load_scenario


def test_demo_scenario_runs_a_full_cycle() -> None:
    scenario = demo_scenario()
    distributor = build_distributor(scenario, Settings())

    cycle = distributor.run_cycle()

    assert cycle.free_colonists == 3
    assert len(cycle.assignments) == 3
    assert scenario.advance(10.0) == 3
    assert distributor.process_completions() == 3


def test_load_scenario_from_file(tmp_path: Path) -> None:
    path = tmp_path / "colony.json"
    path.write_text(
        json.dumps(
            {
                "colonists": [{"id": "ada", "position": [1, 2], "experience": {"mining": 2}}],
                "tasks": {
                    "mining": [
                        {"id": "vein", "position": [5, 5], "duration": 3, "attributes": {"resource_scarcity": 1}}
                    ]
                },
                "resources": {"current": {"ore": 10}, "target": {"ore": 20}},
                "path_step": 2,
            }
        ),
        encoding="utf-8",
    )

    scenario = load_scenario(path)

    assert scenario.colonists[0].colonist_id == "ada"
    assert scenario.colonists[0].experience == {TaskCategory.MINING: 2.0}
    task = scenario.providers[TaskCategory.MINING].list_tasks()[0]
    assert task.task_id == "vein"
    assert task.target == (5.0, 5.0)
    assert scenario.resources.get_target_levels() == {"ore": 20.0}
    assert scenario.pathfinder.step == 2.0


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"tasks": {"farming": []}}, "Unknown task category"),
        ({"tasks": {"mining": [{"position": [0, 0]}]}}, "missing field 'duration'"),
        ({"tasks": {"mining": [{"position": [0], "duration": 1}]}}, "position"),
        ({"colonists": [{"position": [0, 0]}]}, "missing field 'id'"),
        ([1, 2, 3], "JSON object"),
        ({"resources": {"current": {"ore": "lots"}}}, "levels must be numbers"),
        ({"resources": {"target": {"ore": None}}}, "levels must be numbers"),
        ({"resources": [1]}, "resources must be a JSON object"),
        ({"resources": {"current": [1]}}, "current must be a JSON object"),
        ({"tasks": [1]}, "tasks must be a JSON object"),
        ({"tasks": {"mining": 3}}, "must be a list"),
        ({"colonists": {"id": "ada"}}, "colonists must be a list"),
        ({"colonists": [{"id": "ada", "position": ["x", 0]}]}, "must hold numbers"),
        ({"path_step": "far"}, "path_step must be a number"),
        ({"path_step": None}, "path_step must be a number"),
        ({"path_step": 0}, "path_step must be positive"),
    ],
)
def test_malformed_scenarios_raise(tmp_path: Path, payload, message: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ScenarioError, match=message):
        load_scenario(path)


def test_missing_scenario_file(tmp_path: Path) -> None:
    with pytest.raises(ScenarioError, match="does not exist"):
        load_scenario(tmp_path / "nowhere.json")
