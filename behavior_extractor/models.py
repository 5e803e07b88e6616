"""
Data models for the behavior extractor.

Sessions are traces of use-case executions; absolute behavior models are the
per-session graphs built from them. Vertices come in two flavors: one per use
case, plus a single synthetic final state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union
import numpy as np


class FinalState(Enum):
    """Key of the final state; never equal to any use-case id."""

    KEY = "final"


FINAL_STATE_KEY = FinalState.KEY


@dataclass(frozen=True)
class UseCase:
    """A named, identified unit of user-observable behavior."""

    use_case_id: str
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"use_case_id": self.use_case_id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UseCase":
        """Create from dictionary."""
        return cls(
            use_case_id=data.get("use_case_id"),
            name=data.get("name", ""),
        )


@dataclass
class ObservedUseCaseExecution:
    """One record in a session trace."""

    use_case: UseCase
    start_time: int
    end_time: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "use_case": self.use_case.to_dict() if self.use_case else None,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObservedUseCaseExecution":
        """Create from dictionary."""
        use_case = data.get("use_case")
        return cls(
            use_case=UseCase.from_dict(use_case) if use_case else None,
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
        )


@dataclass
class Session:
    """A recorded user session: ordered use-case executions."""

    session_id: str
    executions: list[ObservedUseCaseExecution] = field(default_factory=list)

    @property
    def start_time(self) -> Optional[int]:
        """Start time of the first execution."""
        if not self.executions:
            return None
        return self.executions[0].start_time

    @property
    def end_time(self) -> Optional[int]:
        """End time of the last execution, falling back to its start time."""
        if not self.executions:
            return None
        last = self.executions[-1]
        return last.end_time if last.end_time is not None else last.start_time

    @property
    def duration(self) -> int:
        """Elapsed time between first start and last end."""
        if not self.executions:
            return 0
        return self.end_time - self.start_time

    @property
    def execution_count(self) -> int:
        """Number of executions in session."""
        return len(self.executions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "executions": [e.to_dict() for e in self.executions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        """Create from dictionary."""
        return cls(
            session_id=data.get("session_id", ""),
            executions=[
                ObservedUseCaseExecution.from_dict(e)
                for e in data.get("executions", [])
            ],
        )


@dataclass(eq=False)
class Transition:
    """
    Directed edge to a target vertex.

    `value` counts traversals of the (source, target) pair; `times` holds the
    non-negative time deltas observed for them, in discovery order. A
    traversal with a negative delta is counted but not sampled, so `value`
    may exceed `len(times)`.
    """

    target_vertex: "Vertex"
    value: int = 1
    times: list[int] = field(default_factory=list)

    def record(self, time_distance: Optional[int] = None) -> None:
        """Count one more traversal, sampling its time distance if given."""
        self.value += 1
        if time_distance is not None:
            self.times.append(time_distance)

    @property
    def target_key(self) -> Union[str, FinalState]:
        return self.target_vertex.key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        final = self.target_vertex.is_final
        return {
            "target": None if final else self.target_key,
            "final": final,
            "value": self.value,
            "times": list(self.times),
        }


@dataclass(eq=False)
class UseCaseVertex:
    """Graph node associated with exactly one use case."""

    use_case: UseCase
    outgoing_transitions: list[Transition] = field(default_factory=list)

    is_final = False

    @property
    def key(self) -> str:
        return self.use_case.use_case_id

    @property
    def name(self) -> str:
        return self.use_case.name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "use_case": self.use_case.to_dict(),
            "final": False,
            "transitions": [t.to_dict() for t in self.outgoing_transitions],
        }


@dataclass(eq=False)
class FinalVertex:
    """The synthetic final state of a behavior model."""

    outgoing_transitions: list[Transition] = field(default_factory=list)

    is_final = True
    use_case = None

    @property
    def key(self) -> FinalState:
        return FINAL_STATE_KEY

    @property
    def name(self) -> str:
        return "final"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": None,
            "use_case": None,
            "final": True,
            "transitions": [t.to_dict() for t in self.outgoing_transitions],
        }


Vertex = Union[UseCaseVertex, FinalVertex]


@dataclass
class AbsoluteBehaviorModel:
    """Per-session graph with raw transition counts and time samples."""

    session_id: str
    vertices: list[Vertex] = field(default_factory=list)

    @property
    def final_vertex(self) -> Optional[FinalVertex]:
        """The final state, or None for an empty session."""
        for vertex in self.vertices:
            if vertex.is_final:
                return vertex
        return None

    @property
    def transition_count(self) -> int:
        """Number of distinct transitions in the model."""
        return sum(len(v.outgoing_transitions) for v in self.vertices)

    def get_vertex(self, key: Union[str, FinalState]) -> Optional[Vertex]:
        """Find a vertex by use-case id, or the final state by FINAL_STATE_KEY."""
        for vertex in self.vertices:
            if vertex.key == key:
                return vertex
        return None

    def get_transition(
        self,
        source_key: Union[str, FinalState],
        target_key: Union[str, FinalState],
    ) -> Optional[Transition]:
        """Find the transition between two vertices, if any."""
        source = self.get_vertex(source_key)
        if source is None:
            return None
        for transition in source.outgoing_transitions:
            if transition.target_key == target_key:
                return transition
        return None

    def count_matrix(self) -> np.ndarray:
        """
        Raw transition counts as a square matrix.

        Rows and columns follow vertex order; entry [i, j] is the `value` of
        the transition from vertex i to vertex j (0 when absent).
        """
        positions = {vertex.key: i for i, vertex in enumerate(self.vertices)}
        matrix = np.zeros((len(self.vertices), len(self.vertices)), dtype=np.int64)
        for i, vertex in enumerate(self.vertices):
            for transition in vertex.outgoing_transitions:
                matrix[i, positions[transition.target_key]] = transition.value
        return matrix

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "vertices": [v.to_dict() for v in self.vertices],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AbsoluteBehaviorModel":
        """Create from dictionary."""
        entries = data.get("vertices", [])
        vertices: list[Vertex] = [
            FinalVertex() if entry.get("final")
            else UseCaseVertex(use_case=UseCase.from_dict(entry["use_case"]))
            for entry in entries
        ]
        by_key = {vertex.key: vertex for vertex in vertices}

        # Second pass: targets may appear after their sources
        for source, entry in zip(vertices, entries):
            for t in entry.get("transitions", []):
                target_key = FINAL_STATE_KEY if t.get("final") else t["target"]
                source.outgoing_transitions.append(Transition(
                    target_vertex=by_key[target_key],
                    value=t.get("value", 1),
                    times=list(t.get("times", [])),
                ))

        return cls(session_id=data.get("session_id", ""), vertices=vertices)
