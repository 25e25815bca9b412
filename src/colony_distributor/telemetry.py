"""Contract for distribution telemetry sinks."""

from __future__ import annotations

import logging
from typing import Protocol


class Telemetry(Protocol):
    """Reports distribution cycle outcomes."""

    def emit(self, event_name: str, payload: dict) -> None:
        """Publish telemetry event to the configured sink."""


class LoggingTelemetry:
    """Forwards telemetry events to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("colony_distributor.telemetry")

    def emit(self, event_name: str, payload: dict) -> None:
        self._logger.info(event_name, extra={"payload": payload})
