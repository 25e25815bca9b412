from __future__ import annotations

import logging
from pathlib import Path

from colony_distributor.history import AssignmentRecord, AssignmentStatus, InMemoryHistoryStore, JsonlHistoryStore
from colony_distributor.models import TaskCategory


def test_jsonl_history_store_roundtrip(tmp_path: Path) -> None:
    store = JsonlHistoryStore(tmp_path / "history" / "assignments.jsonl")
    first = AssignmentRecord(
        colonist_id="ada",
        category=TaskCategory.MINING,
        task_id="ore-vein",
        status=AssignmentStatus.ASSIGNED,
        priority=16.0,
    )
    second = AssignmentRecord(
        colonist_id="ada",
        category=TaskCategory.MINING,
        task_id="ore-vein",
        status=AssignmentStatus.COMPLETED,
    )
    store.append(first)
    store.append(second)

    recent = store.list_recent(limit=5)

    assert [record.id for record in recent] == [second.id, first.id]
    assert recent[1].category is TaskCategory.MINING
    assert recent[1].priority == 16.0
    assert recent[1].recorded_at == first.recorded_at
    assert recent[0].status is AssignmentStatus.COMPLETED


def test_jsonl_history_store_missing_file(tmp_path: Path) -> None:
    assert JsonlHistoryStore(tmp_path / "none.jsonl").list_recent(limit=3) == []


def test_in_memory_history_is_bounded() -> None:
    store = InMemoryHistoryStore(max_records=2)
    for task_id in ("a", "b", "c"):
        store.append(
            AssignmentRecord(
                colonist_id="bo",
                category=TaskCategory.BUILDING,
                task_id=task_id,
                status=AssignmentStatus.ASSIGNED,
            )
        )

    assert [record.task_id for record in store.list_recent(limit=10)] == ["c", "b"]


def test_jsonl_history_store_skips_corrupt_lines(tmp_path: Path, caplog) -> None:
    store = JsonlHistoryStore(tmp_path / "assignments.jsonl")
    kept = AssignmentRecord(
        colonist_id="cy",
        category=TaskCategory.RESEARCH,
        task_id="lab",
        status=AssignmentStatus.ASSIGNED,
    )
    latest = AssignmentRecord(
        colonist_id="cy",
        category=TaskCategory.RESEARCH,
        task_id="lab",
        status=AssignmentStatus.COMPLETED,
    )
    store.append(kept)
    with store.path.open("a", encoding="utf-8") as handle:
        handle.write('{"id": "half-writ\n')
        handle.write('{"id": "x", "colonist_id": "cy", "category": "farming"}\n')
    store.append(latest)

    with caplog.at_level(logging.WARNING, logger="colony_distributor.history"):
        recent = store.list_recent(limit=5)

    assert [record.id for record in recent] == [latest.id, kept.id]
    assert caplog.messages.count("history_record_skipped") == 2
