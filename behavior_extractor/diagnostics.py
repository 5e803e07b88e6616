"""
Diagnostics raised while building behavior models.

Data-quality anomalies never interrupt a transformation; they are handed to a
sink as structured events instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

NEGATIVE_TIME_RANGE_MESSAGE = (
    "negative time range detected in transition from state \"{source}\" "
    "to state \"{target}\" in session \"{session_id}\"; range will be ignored"
)


@dataclass(frozen=True)
class NegativeTimeRange:
    """A transition whose time distance came out negative."""

    session_id: str
    source_use_case_id: str
    source_name: str
    target_use_case_id: str
    target_name: str
    time_distance: int
    severity: str = "warning"

    @property
    def message(self) -> str:
        return NEGATIVE_TIME_RANGE_MESSAGE.format(
            source=self.source_name,
            target=self.target_name,
            session_id=self.session_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "severity": self.severity,
            "session_id": self.session_id,
            "source_use_case_id": self.source_use_case_id,
            "target_use_case_id": self.target_use_case_id,
            "time_distance": self.time_distance,
            "message": self.message,
        }


class DiagnosticSink(Protocol):
    """Receives diagnostics emitted during a transformation."""

    def emit(self, event: NegativeTimeRange) -> None:
        ...


class LoggingDiagnosticSink:
    """Writes diagnostics to the module logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log if log is not None else logger

    def emit(self, event: NegativeTimeRange) -> None:
        self.log.warning(event.message)


class NullDiagnosticSink:
    """Discards diagnostics."""

    def emit(self, event: NegativeTimeRange) -> None:
        pass


@dataclass
class CollectingDiagnosticSink:
    """Keeps diagnostics in memory, optionally forwarding them."""

    events: list[NegativeTimeRange] = field(default_factory=list)
    forward_to: DiagnosticSink | None = None

    def emit(self, event: NegativeTimeRange) -> None:
        self.events.append(event)
        if self.forward_to is not None:
            self.forward_to.emit(event)

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
