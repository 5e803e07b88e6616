"""
Graph Builder - Turn one session trace into behavior model vertices.

Vertices are deduplicated per use-case id and transitions per
(source, target) pair. Every traversal increments its transition's counter;
only non-negative time distances between consecutive start times are kept
as samples. A non-empty trace always ends in a transition to a final state.
"""

import logging
from numbers import Integral
from typing import Optional, Sequence, Union

from .diagnostics import DiagnosticSink, LoggingDiagnosticSink, NegativeTimeRange
from .exceptions import (
    InvalidSessionError,
    InvalidStartTimeError,
    MissingUseCaseError,
    MissingUseCaseIdError,
)
from .models import (
    FinalState,
    FinalVertex,
    ObservedUseCaseExecution,
    Session,
    Transition,
    UseCase,
    UseCaseVertex,
    Vertex,
)

logger = logging.getLogger(__name__)


class _GraphState:
    """Vertex and transition registries for a single build."""

    def __init__(self):
        self.vertices: list[Vertex] = []
        self.by_use_case: dict[str, UseCaseVertex] = {}
        # (source key, target key) -> transition
        self.transitions: dict[tuple[str, Union[str, FinalState]], Transition] = {}

    def vertex_for(self, use_case: UseCase) -> UseCaseVertex:
        """Find the vertex of a use case, creating it if needed."""
        vertex = self.by_use_case.get(use_case.use_case_id)
        if vertex is None:
            vertex = UseCaseVertex(use_case=use_case)
            self.by_use_case[use_case.use_case_id] = vertex
            self.vertices.append(vertex)
        return vertex

    def install_transition(self, source: Vertex, target: Vertex) -> Transition:
        """Create a transition with an initial count of 1."""
        transition = Transition(target_vertex=target)
        source.outgoing_transitions.append(transition)
        self.transitions[(source.key, target.key)] = transition
        return transition

    def traverse(
        self,
        source: Vertex,
        target: Vertex,
        time_distance: Optional[int],
    ) -> Transition:
        """Count a traversal of source -> target, sampling its time distance."""
        transition = self.transitions.get((source.key, target.key))
        if transition is None:
            transition = self.install_transition(source, target)
            if time_distance is not None:
                transition.times.append(time_distance)
        else:
            transition.record(time_distance)
        return transition


class GraphBuilder:
    """Builds the vertices of an absolute behavior model from a session."""

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        """
        Initialize the builder.

        Args:
            sink: Receiver of data-quality diagnostics (logs them if None)
        """
        self.sink = sink if sink is not None else LoggingDiagnosticSink()
        self.negative_time_ranges = 0

    def build_graph(
        self,
        session: Session,
        default_use_cases: Optional[Sequence[UseCase]] = None,
    ) -> list[Vertex]:
        """
        Transform a session into vertices with their outgoing transitions.

        Args:
            session: Session whose trace is walked in order
            default_use_cases: Use cases to seed as vertices even if the
                trace never visits them

        Returns:
            Vertex list: defaults first, then use cases in order of first
            appearance, then the final vertex (non-empty traces only)

        Raises:
            InvalidSessionError: if the session or one of its records is
                malformed; no partial graph is produced
        """
        self._validate(session, default_use_cases)

        state = _GraphState()
        for use_case in default_use_cases or ():
            state.vertex_for(use_case)

        previous: Optional[ObservedUseCaseExecution] = None
        destination: Optional[UseCaseVertex] = None

        for execution in session.executions:
            destination = state.vertex_for(execution.use_case)

            if previous is not None:
                # Exists already: it was the destination of the last step
                source = state.by_use_case[previous.use_case.use_case_id]

                # Start times only; a use case's duration belongs to the think time
                time_distance = execution.start_time - previous.start_time
                if time_distance < 0:
                    self._report_negative(session, previous, execution, time_distance)
                    state.traverse(source, destination, None)
                else:
                    state.traverse(source, destination, int(time_distance))

            previous = execution

        if destination is not None:
            final_vertex = FinalVertex()
            state.vertices.append(final_vertex)
            state.install_transition(destination, final_vertex)

        logger.debug(
            f"Built graph for session {session.session_id}: "
            f"{len(state.vertices)} vertices, {len(state.transitions)} transitions"
        )
        return state.vertices

    def _report_negative(
        self,
        session: Session,
        source: ObservedUseCaseExecution,
        target: ObservedUseCaseExecution,
        time_distance: int,
    ) -> None:
        self.negative_time_ranges += 1
        self.sink.emit(NegativeTimeRange(
            session_id=session.session_id,
            source_use_case_id=source.use_case.use_case_id,
            source_name=source.use_case.name,
            target_use_case_id=target.use_case.use_case_id,
            target_name=target.use_case.name,
            time_distance=time_distance,
        ))

    @staticmethod
    def _validate(
        session: Session,
        default_use_cases: Optional[Sequence[UseCase]],
    ) -> None:
        """Reject malformed input before any vertex is built."""
        if session is None:
            raise InvalidSessionError("Session must not be None")

        for i, use_case in enumerate(default_use_cases or ()):
            if use_case is None or use_case.use_case_id is None:
                raise MissingUseCaseIdError(
                    None, i, name=getattr(use_case, "name", "") or ""
                )

        for i, execution in enumerate(session.executions):
            if execution is None or execution.use_case is None:
                raise MissingUseCaseError(session.session_id, i)
            if execution.use_case.use_case_id is None:
                raise MissingUseCaseIdError(
                    session.session_id, i, name=execution.use_case.name
                )
            start_time = execution.start_time
            if not isinstance(start_time, Integral) or isinstance(start_time, bool):
                raise InvalidStartTimeError(session.session_id, i, start_time)
