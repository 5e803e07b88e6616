"""Tests for the mock session generator."""

import pytest

from behavior_extractor.mock import (
    FLOW_TEMPLATES,
    USE_CASES,
    MockSessionGenerator,
    generate_sample_sessions,
)


class TestMockSessionGenerator:
    """Tests for MockSessionGenerator."""

    @pytest.mark.parametrize("template_name", list(FLOW_TEMPLATES))
    def test_generate_from_template(self, mock_generator, template_name):
        session = mock_generator.generate_session(template_name=template_name, base_time=1000)

        steps = FLOW_TEMPLATES[template_name]["steps"]
        assert 1 <= session.execution_count <= len(steps)
        assert session.start_time == 1000
        ids = [e.use_case.use_case_id for e in session.executions]
        assert ids == [USE_CASES[s].use_case_id for s in steps[:len(ids)]]

    def test_start_times_increase(self, mock_generator):
        session = mock_generator.generate_session("browse_and_buy")
        starts = [e.start_time for e in session.executions]
        assert starts == sorted(starts)
        assert all(e.end_time > e.start_time for e in session.executions)

    def test_clock_skew_produces_negative_range(self):
        generator = MockSessionGenerator(seed=7)
        sessions = [
            generator.generate_session("window_shopping", clock_skew=True)
            for _ in range(10)
        ]

        multi = [s for s in sessions if s.execution_count > 1]
        assert multi
        for session in multi:
            execs = session.executions
            assert any(cur.start_time < prev.start_time for prev, cur in zip(execs, execs[1:]))

    def test_clock_skew_ignored_for_single_step(self, mock_generator):
        session = mock_generator.generate_session("bounce", base_time=50, clock_skew=True)
        assert session.start_time == 50

    def test_seed_reproducible(self):
        first = MockSessionGenerator(seed=1).generate_batch(5)
        second = MockSessionGenerator(seed=1).generate_batch(5)
        assert [s.to_dict() for s in first] == [s.to_dict() for s in second]

    def test_generate_batch(self, mock_generator):
        sessions = mock_generator.generate_batch(15)

        assert len(sessions) == 15
        assert len({s.session_id for s in sessions}) == 15

    def test_generate_batch_single_template(self, mock_generator):
        sessions = mock_generator.generate_batch(5, template_weights={"bounce": 1.0})
        assert all(s.execution_count == 1 for s in sessions)

    def test_generate_sample_sessions(self):
        assert len(generate_sample_sessions(8)) == 8
