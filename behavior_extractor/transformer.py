"""
Session Transformer - Turn session traces into absolute behavior models.

Each session yields one independent model; use cases given as defaults are
seeded into every model without being shared between them.
"""

import logging
from typing import Iterable, Iterator, Optional, Sequence

from .builder import GraphBuilder
from .config import ExtractorConfig
from .diagnostics import DiagnosticSink, LoggingDiagnosticSink, NullDiagnosticSink
from .models import AbsoluteBehaviorModel, Session, UseCase

logger = logging.getLogger(__name__)


class SessionTransformer:
    """Batch transformer from sessions to absolute behavior models."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        sink: Optional[DiagnosticSink] = None,
    ):
        """
        Initialize the transformer.

        Args:
            config: Configuration (uses defaults if None)
            sink: Diagnostic sink; chosen from config if None
        """
        self.config = config or ExtractorConfig()
        if sink is None:
            sink = (
                LoggingDiagnosticSink()
                if self.config.log_negative_time_ranges
                else NullDiagnosticSink()
            )
        self.builder = GraphBuilder(sink=sink)

    def _defaults(self, default_use_cases: Optional[Sequence[UseCase]]) -> Sequence[UseCase]:
        if default_use_cases is None:
            return self.config.default_use_cases
        return default_use_cases

    def transform_session(
        self,
        session: Session,
        default_use_cases: Optional[Sequence[UseCase]] = None,
    ) -> AbsoluteBehaviorModel:
        """
        Transform a single session into an absolute behavior model.

        Args:
            session: Session to transform
            default_use_cases: Use cases seeded as vertices (config
                defaults if None)

        Returns:
            A new AbsoluteBehaviorModel owning fresh vertices
        """
        vertices = self.builder.build_graph(session, self._defaults(default_use_cases))
        return AbsoluteBehaviorModel(session_id=session.session_id, vertices=vertices)

    def iter_transform(
        self,
        sessions: Iterable[Session],
        default_use_cases: Optional[Sequence[UseCase]] = None,
    ) -> Iterator[AbsoluteBehaviorModel]:
        """Lazily transform sessions one at a time, in input order."""
        defaults = self._defaults(default_use_cases)
        for session in sessions:
            yield self.transform_session(session, defaults)

    def transform(
        self,
        sessions: Iterable[Session],
        default_use_cases: Optional[Sequence[UseCase]] = None,
    ) -> list[AbsoluteBehaviorModel]:
        """
        Transform sessions into absolute behavior models.

        Args:
            sessions: Sessions to transform
            default_use_cases: Use cases seeded as vertices into every model

        Returns:
            One model per session, in input order
        """
        anomalies_before = self.builder.negative_time_ranges
        models = list(self.iter_transform(sessions, default_use_cases))

        anomalies = self.builder.negative_time_ranges - anomalies_before
        logger.info(
            f"Transformed {len(models)} sessions: "
            f"{sum(len(m.vertices) for m in models)} vertices, "
            f"{sum(m.transition_count for m in models)} transitions, "
            f"{anomalies} negative time ranges ignored"
        )
        return models


def transform_sessions(
    sessions: Iterable[Session],
    default_use_cases: Optional[Sequence[UseCase]] = None,
    config: Optional[ExtractorConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> list[AbsoluteBehaviorModel]:
    """
    Convenience function to transform sessions.

    Args:
        sessions: Sessions to transform
        default_use_cases: Use cases seeded as vertices into every model
        config: Optional configuration
        sink: Optional diagnostic sink

    Returns:
        List of AbsoluteBehaviorModel
    """
    transformer = SessionTransformer(config, sink=sink)
    return transformer.transform(sessions, default_use_cases)
