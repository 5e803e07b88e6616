"""Tests for data models."""

import json

import numpy as np

from behavior_extractor.builder import GraphBuilder
from behavior_extractor.models import (
    FINAL_STATE_KEY,
    AbsoluteBehaviorModel,
    FinalVertex,
    ObservedUseCaseExecution,
    Session,
    Transition,
    UseCase,
    UseCaseVertex,
)


class TestUseCase:
    """Tests for UseCase model."""

    def test_use_case_is_hashable(self):
        assert len({UseCase("A", "Login"), UseCase("A", "Login")}) == 1

    def test_use_case_from_dict(self):
        uc = UseCase.from_dict({"use_case_id": "A", "name": "Login"})
        assert uc == UseCase("A", "Login")


class TestSession:
    """Tests for Session model."""

    def test_empty_session(self):
        session = Session(session_id="s")
        assert session.start_time is None
        assert session.end_time is None
        assert session.duration == 0
        assert session.execution_count == 0

    def test_session_times(self, use_case_a, use_case_b):
        session = Session(session_id="s", executions=[
            ObservedUseCaseExecution(use_case_a, 100, 150),
            ObservedUseCaseExecution(use_case_b, 400, 480),
        ])
        assert session.start_time == 100
        assert session.end_time == 480
        assert session.duration == 380

    def test_end_time_falls_back_to_start(self, use_case_a):
        session = Session(session_id="s", executions=[
            ObservedUseCaseExecution(use_case_a, 100),
        ])
        assert session.end_time == 100

    def test_session_from_dict(self):
        d = {
            "session_id": "s1",
            "executions": [
                {"use_case": {"use_case_id": "A", "name": "Login"}, "start_time": 0},
                {"use_case": {"use_case_id": "B", "name": "Browse"}, "start_time": 5, "end_time": 9},
            ],
        }
        session = Session.from_dict(d)

        assert session.session_id == "s1"
        assert session.execution_count == 2
        assert session.executions[1].use_case.name == "Browse"
        assert session.executions[1].end_time == 9
        assert session.to_dict()["executions"] == [e.to_dict() for e in session.executions]


class TestTransition:
    """Tests for Transition model."""

    def test_new_transition_counts_one(self):
        t = Transition(target_vertex=FinalVertex())
        assert t.value == 1
        assert t.times == []

    def test_record_with_sample(self):
        t = Transition(target_vertex=FinalVertex())
        t.record(12)
        assert t.value == 2
        assert t.times == [12]

    def test_record_without_sample(self):
        t = Transition(target_vertex=FinalVertex())
        t.record(None)
        assert t.value == 2
        assert t.times == []


class TestVertices:
    """Tests for the vertex variants."""

    def test_use_case_vertex(self, use_case_a):
        vertex = UseCaseVertex(use_case=use_case_a)
        assert vertex.key == "A"
        assert vertex.name == "Login"
        assert not vertex.is_final

    def test_final_vertex(self):
        vertex = FinalVertex()
        assert vertex.key == FINAL_STATE_KEY
        assert vertex.use_case is None
        assert vertex.is_final

    def test_vertices_compare_by_identity(self, use_case_a):
        assert UseCaseVertex(use_case=use_case_a) != UseCaseVertex(use_case=use_case_a)


class TestAbsoluteBehaviorModel:
    """Tests for AbsoluteBehaviorModel."""

    def _model(self, session, sink):
        return AbsoluteBehaviorModel(
            session_id=session.session_id,
            vertices=GraphBuilder(sink).build_graph(session),
        )

    def test_lookup_helpers(self, example_session, sink):
        model = self._model(example_session, sink)

        assert model.final_vertex is model.vertices[-1]
        assert model.get_vertex("A").name == "Login"
        assert model.get_vertex("missing") is None
        assert model.get_transition("A", FINAL_STATE_KEY) is None
        assert model.get_transition("missing", "A") is None

    def test_empty_model(self):
        model = AbsoluteBehaviorModel(session_id="empty")
        assert model.final_vertex is None
        assert model.transition_count == 0
        assert model.count_matrix().shape == (0, 0)

    def test_count_matrix(self, example_session, sink):
        model = self._model(example_session, sink)

        expected = np.array([
            [0, 2, 0],
            [1, 0, 1],
            [0, 0, 0],
        ])
        np.testing.assert_array_equal(model.count_matrix(), expected)

    def test_to_dict(self, example_session, sink):
        d = self._model(example_session, sink).to_dict()

        assert d["session_id"] == "S1"
        assert [v["key"] for v in d["vertices"]] == ["A", "B", None]
        assert d["vertices"][0]["transitions"] == [
            {"target": "B", "final": False, "value": 2, "times": [5, 17]}
        ]
        assert d["vertices"][2]["final"] is True
        json.dumps(d)

    def test_from_dict_restores_structure(self, example_session, sink):
        model = self._model(example_session, sink)
        restored = AbsoluteBehaviorModel.from_dict(json.loads(json.dumps(model.to_dict())))

        assert restored.to_dict() == model.to_dict()
        assert restored.get_transition("B", FINAL_STATE_KEY).target_vertex is restored.final_vertex

    def test_use_case_id_shaped_like_final_key(self, sink):
        x = UseCase("X", "Search")
        dollar = UseCase("$", "Dollar")
        session = Session(session_id="S$", executions=[
            ObservedUseCaseExecution(x, 0),
            ObservedUseCaseExecution(dollar, 1),
            ObservedUseCaseExecution(x, 2),
        ])
        model = self._model(session, sink)

        assert isinstance(model.get_vertex("$"), UseCaseVertex)
        assert model.get_vertex(FINAL_STATE_KEY) is model.final_vertex
        assert model.get_vertex("final") is None
        expected = np.array([
            [0, 1, 1],
            [1, 0, 0],
            [0, 0, 0],
        ])
        np.testing.assert_array_equal(model.count_matrix(), expected)

        restored = AbsoluteBehaviorModel.from_dict(json.loads(json.dumps(model.to_dict())))
        assert restored.to_dict() == model.to_dict()
        assert restored.get_transition("$", "X").value == 1
        assert restored.final_vertex.outgoing_transitions == []
