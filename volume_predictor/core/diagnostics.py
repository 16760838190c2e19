"""Reporting channel for recoverable data anomalies.

Cleaning and post-processing never raise on noisy data. Instead they describe
each correction as a :class:`DiagnosticEvent` and hand it to a sink. The
default sink writes to the standard :mod:`logging` module; tests and callers
that want to inspect corrections can use :class:`CollectingDiagnostics`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)

NEGATIVE_CLAMPED = "negative_clamped"
ZERO_SUM = "zero_sum"
BIN_COUNT_MISMATCH = "bin_count_mismatch"
EMPTY_OBSERVATION = "empty_observation"
VALUES_REMOVED = "values_removed"

EVENT_LEVELS: dict[str, int] = {
    NEGATIVE_CLAMPED: logging.WARNING,
    ZERO_SUM: logging.WARNING,
    BIN_COUNT_MISMATCH: logging.WARNING,
    EMPTY_OBSERVATION: logging.DEBUG,
    VALUES_REMOVED: logging.DEBUG,
}


@dataclass(frozen=True)
class DiagnosticEvent:
    """A single recoverable anomaly detected while cleaning or predicting."""

    kind: str
    message: str
    day: date | None = None
    symbol: str | None = None
    index: int | None = None
    value: float | None = None

    @property
    def level(self) -> int:
        return EVENT_LEVELS.get(self.kind, logging.INFO)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["day"] = self.day.isoformat() if self.day is not None else None
        return payload


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Anything able to receive diagnostic events."""

    def report(self, event: DiagnosticEvent) -> None:  # pragma: no cover - interface
        ...


class LoggingDiagnostics:
    """Forward diagnostic events to a :class:`logging.Logger`."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER

    def report(self, event: DiagnosticEvent) -> None:
        context: list[str] = []
        if event.day is not None:
            context.append(f"day={event.day.isoformat()}")
        if event.symbol is not None:
            context.append(f"symbol={event.symbol}")
        if event.index is not None:
            context.append(f"index={event.index}")
        if context:
            self.logger.log(event.level, "%s (%s)", event.message, ", ".join(context))
        else:
            self.logger.log(event.level, "%s", event.message)


@dataclass
class CollectingDiagnostics:
    """Keep diagnostic events in memory, optionally forwarding them."""

    forward_to: DiagnosticsSink | None = None
    events: list[DiagnosticEvent] = field(default_factory=list)

    def report(self, event: DiagnosticEvent) -> None:
        self.events.append(event)
        if self.forward_to is not None:
            self.forward_to.report(event)

    def of_kind(self, kind: str) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)


def default_diagnostics() -> DiagnosticsSink:
    return LoggingDiagnostics()


__all__ = [
    "BIN_COUNT_MISMATCH",
    "CollectingDiagnostics",
    "DiagnosticEvent",
    "DiagnosticsSink",
    "EMPTY_OBSERVATION",
    "LoggingDiagnostics",
    "NEGATIVE_CLAMPED",
    "VALUES_REMOVED",
    "ZERO_SUM",
    "default_diagnostics",
]
