"""Assignment history stores."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from colony_distributor.models import TaskCategory


class AssignmentStatus(str, Enum):
    """Lifecycle states recorded for an assignment."""

    ASSIGNED = "assigned"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class AssignmentRecord:
    """One lifecycle transition of a colonist-task pairing."""

    colonist_id: str
    category: TaskCategory
    task_id: str
    status: AssignmentStatus
    priority: float | None = None
    error: str | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AssignmentHistoryStore(Protocol):
    """Persistence contract for assignment history."""

    def append(self, record: AssignmentRecord) -> None:
        """Persist one record."""

    def list_recent(self, limit: int) -> list[AssignmentRecord]:
        """Return up to ``limit`` newest records."""


class InMemoryHistoryStore:
    """Bounded in-memory history store."""

    def __init__(self, max_records: int = 1_000) -> None:
        self._records: deque[AssignmentRecord] = deque(maxlen=max_records)

    def append(self, record: AssignmentRecord) -> None:
        self._records.appendleft(record)

    def list_recent(self, limit: int) -> list[AssignmentRecord]:
        return list(self._records)[:limit]


class JsonlHistoryStore:
    """JSONL-backed assignment history persistence."""

    def __init__(self, file_path: str | Path, *, logger: logging.Logger | None = None) -> None:
        self._path = Path(file_path)
        self._logger = logger or logging.getLogger("colony_distributor.history")
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: AssignmentRecord) -> None:
        payload = asdict(record)
        payload["category"] = record.category.value
        payload["status"] = record.status.value
        payload["recorded_at"] = record.recorded_at.isoformat()
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def list_recent(self, limit: int) -> list[AssignmentRecord]:
        if not self._path.exists():
            return []

        records: list[AssignmentRecord] = []
        with self._path.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                try:
                    payload = json.loads(line)
                    record = AssignmentRecord(
                        id=payload["id"],
                        colonist_id=payload["colonist_id"],
                        category=TaskCategory(payload["category"]),
                        task_id=payload["task_id"],
                        status=AssignmentStatus(payload["status"]),
                        priority=payload.get("priority"),
                        error=payload.get("error"),
                        recorded_at=datetime.fromisoformat(payload["recorded_at"]),
                    )
                except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                    self._logger.warning(
                        "history_record_skipped",
                        extra={"path": str(self._path), "line": line_number},
                    )
                    continue
                records.append(record)

        records.reverse()
        return records[:limit]
