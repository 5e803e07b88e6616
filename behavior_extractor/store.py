"""
Session Store - SQLite persistence for sessions and behavior models.

Acts as the session repository the transformer reads from, and keeps the
resulting absolute behavior models alongside their sessions.
"""

import json
import logging
import sqlite3
from typing import Any, Optional, Iterator

from .config import ExtractorConfig
from .exceptions import MissingUseCaseError, MissingUseCaseIdError, StoreDatabaseError
from .models import AbsoluteBehaviorModel, ObservedUseCaseExecution, Session, UseCase

logger = logging.getLogger(__name__)


class SessionStore:
    """SQLite-backed storage for session traces."""

    def __init__(self, config: Optional[ExtractorConfig] = None):
        """
        Initialize the session store.

        Args:
            config: Configuration (uses defaults if None)
        """
        self.config = config or ExtractorConfig()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database connection and schema."""
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

        self._create_schema()
        logger.info(f"SessionStore initialized: {db_path}")

    def _create_schema(self) -> None:
        """Create database schema if not exists."""
        schema = """
        -- Use case catalog (as observed)
        CREATE TABLE IF NOT EXISTS use_cases (
            use_case_id TEXT PRIMARY KEY,
            name TEXT
        );

        -- Sessions table
        CREATE TABLE IF NOT EXISTS sessions (
            session_id TEXT PRIMARY KEY,
            start_time INTEGER,
            end_time INTEGER,
            execution_count INTEGER DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time);

        -- Executions table
        CREATE TABLE IF NOT EXISTS executions (
            session_id TEXT NOT NULL,
            sequence_num INTEGER NOT NULL,
            use_case_id TEXT NOT NULL,
            start_time INTEGER NOT NULL,
            end_time INTEGER,

            PRIMARY KEY (session_id, sequence_num),
            FOREIGN KEY (session_id) REFERENCES sessions(session_id),
            FOREIGN KEY (use_case_id) REFERENCES use_cases(use_case_id)
        );

        -- Absolute behavior models, one per session
        CREATE TABLE IF NOT EXISTS behavior_models (
            session_id TEXT PRIMARY KEY,
            model TEXT NOT NULL,
            vertex_count INTEGER,
            transition_count INTEGER,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP,

            FOREIGN KEY (session_id) REFERENCES sessions(session_id)
        );
        """
        try:
            self._conn.executescript(schema)
            self._conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to create schema: {e}")
            raise StoreDatabaseError("create schema", str(e)) from e

    def save_session(self, session: Session) -> bool:
        """
        Save a session and its executions.

        Args:
            session: Session to save

        Returns:
            True if successful

        Raises:
            MissingUseCaseError: if an execution has no use case; nothing
                is written
        """
        for i, execution in enumerate(session.executions):
            if execution is None or execution.use_case is None:
                raise MissingUseCaseError(session.session_id, i)
            if execution.use_case.use_case_id is None:
                raise MissingUseCaseIdError(
                    session.session_id, i, name=execution.use_case.name
                )

        try:
            # Commits on success, rolls back on any error
            with self._conn:
                self._save_session_rows(session)
            logger.debug(f"Saved session {session.session_id} with {session.execution_count} executions")
            return True

        except sqlite3.Error as e:
            logger.error(f"Failed to save session {session.session_id}: {e}")
            return False

    def _save_session_rows(self, session: Session) -> None:
        self._conn.execute(
            """
            INSERT OR REPLACE INTO sessions
            (session_id, start_time, end_time, execution_count)
            VALUES (?, ?, ?, ?)
            """,
            (
                session.session_id,
                session.start_time,
                session.end_time,
                session.execution_count,
            ),
        )

        # Delete existing executions for this session (for updates)
        self._conn.execute(
            "DELETE FROM executions WHERE session_id = ?",
            (session.session_id,),
        )

        for i, execution in enumerate(session.executions):
            use_case = execution.use_case
            self._conn.execute(
                "INSERT OR REPLACE INTO use_cases (use_case_id, name) VALUES (?, ?)",
                (use_case.use_case_id, use_case.name),
            )
            self._conn.execute(
                """
                INSERT INTO executions
                (session_id, sequence_num, use_case_id, start_time, end_time)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    session.session_id,
                    i,
                    use_case.use_case_id,
                    execution.start_time,
                    execution.end_time,
                ),
            )

    def get_session(self, session_id: str, include_executions: bool = True) -> Optional[Session]:
        """
        Retrieve a session by ID.

        Args:
            session_id: Session ID
            include_executions: Whether to load executions

        Returns:
            Session or None if not found
        """
        try:
            cursor = self._conn.execute(
                "SELECT session_id FROM sessions WHERE session_id = ?",
                (session_id,),
            )
            if not cursor.fetchone():
                return None

            session = Session(session_id=session_id)
            if include_executions:
                session.executions = self._load_executions(session_id)
            return session

        except sqlite3.Error as e:
            logger.error(f"Failed to get session {session_id}: {e}")
            return None

    def _load_executions(self, session_id: str) -> list[ObservedUseCaseExecution]:
        """Load executions for a session, in trace order."""
        cursor = self._conn.execute(
            """
            SELECT e.start_time, e.end_time, u.use_case_id, u.name
            FROM executions e JOIN use_cases u ON e.use_case_id = u.use_case_id
            WHERE e.session_id = ?
            ORDER BY e.sequence_num
            """,
            (session_id,),
        )

        # One UseCase instance per id, shared by the session's records
        use_cases: dict[str, UseCase] = {}
        executions = []
        for row in cursor:
            use_case = use_cases.get(row["use_case_id"])
            if use_case is None:
                use_case = UseCase(use_case_id=row["use_case_id"], name=row["name"] or "")
                use_cases[use_case.use_case_id] = use_case
            executions.append(ObservedUseCaseExecution(
                use_case=use_case,
                start_time=row["start_time"],
                end_time=row["end_time"],
            ))
        return executions

    def list_sessions(
        self,
        limit: int = 100,
        offset: int = 0,
        include_executions: bool = False,
    ) -> tuple[list[Session], int]:
        """
        List sessions in insertion order.

        Args:
            limit: Max results
            offset: Pagination offset
            include_executions: Whether to load executions

        Returns:
            Tuple of (sessions, total_count)
        """
        total = self._conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

        cursor = self._conn.execute(
            "SELECT session_id FROM sessions ORDER BY rowid LIMIT ? OFFSET ?",
            (limit, offset),
        )
        sessions = []
        for row in cursor.fetchall():
            session = Session(session_id=row["session_id"])
            if include_executions:
                session.executions = self._load_executions(session.session_id)
            sessions.append(session)
        return sessions, total

    def list_session_summaries(
        self,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List session summaries from the stored session columns.

        Returns:
            Tuple of (summaries, total_count); each summary holds
            session_id, start_time, end_time and execution_count
        """
        total = self._conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

        cursor = self._conn.execute(
            """
            SELECT session_id, start_time, end_time, execution_count
            FROM sessions ORDER BY rowid LIMIT ? OFFSET ?
            """,
            (limit, offset),
        )
        return [dict(row) for row in cursor.fetchall()], total

    def iter_sessions(self, batch_size: int = 100) -> Iterator[Session]:
        """
        Iterate over all sessions with their executions.

        Args:
            batch_size: Batch size for memory efficiency

        Yields:
            Session objects
        """
        offset = 0
        while True:
            sessions, _ = self.list_sessions(
                limit=batch_size, offset=offset, include_executions=True
            )
            if not sessions:
                break
            yield from sessions
            offset += batch_size

    def delete_session(self, session_id: str) -> bool:
        """Delete a session, its executions and its model."""
        try:
            self._conn.execute("DELETE FROM executions WHERE session_id = ?", (session_id,))
            self._conn.execute("DELETE FROM behavior_models WHERE session_id = ?", (session_id,))
            cursor = self._conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
            self._conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Failed to delete session {session_id}: {e}")
            self._conn.rollback()
            return False

    def get_use_cases(self) -> list[UseCase]:
        """Get all use cases seen in stored sessions."""
        try:
            cursor = self._conn.execute("SELECT * FROM use_cases ORDER BY use_case_id")
            return [UseCase(use_case_id=row["use_case_id"], name=row["name"] or "") for row in cursor]
        except sqlite3.Error as e:
            logger.error(f"Failed to get use cases: {e}")
            return []

    # ========== Behavior Model Operations ==========

    def save_behavior_model(self, model: AbsoluteBehaviorModel) -> bool:
        """Save or replace the model of a session."""
        try:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO behavior_models
                (session_id, model, vertex_count, transition_count)
                VALUES (?, ?, ?, ?)
                """,
                (
                    model.session_id,
                    json.dumps(model.to_dict()),
                    len(model.vertices),
                    model.transition_count,
                ),
            )
            self._conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to save behavior model for {model.session_id}: {e}")
            self._conn.rollback()
            return False

    def get_behavior_model(self, session_id: str) -> Optional[dict[str, Any]]:
        """Get the serialized model of a session, if one was saved."""
        try:
            row = self._conn.execute(
                "SELECT model FROM behavior_models WHERE session_id = ?",
                (session_id,),
            ).fetchone()
            return json.loads(row["model"]) if row else None
        except sqlite3.Error as e:
            logger.error(f"Failed to get behavior model for {session_id}: {e}")
            return None

    # ========== Statistics ==========

    def get_stats(self) -> dict:
        """Get store statistics."""
        try:
            stats = {}

            cursor = self._conn.execute("SELECT COUNT(*) FROM sessions")
            stats["total_sessions"] = cursor.fetchone()[0]

            cursor = self._conn.execute("SELECT COUNT(*) FROM executions")
            stats["total_executions"] = cursor.fetchone()[0]

            cursor = self._conn.execute("SELECT COUNT(*) FROM use_cases")
            stats["total_use_cases"] = cursor.fetchone()[0]

            cursor = self._conn.execute("SELECT COUNT(*) FROM behavior_models")
            stats["total_models"] = cursor.fetchone()[0]

            cursor = self._conn.execute("SELECT AVG(execution_count) FROM sessions")
            result = cursor.fetchone()[0]
            stats["avg_executions_per_session"] = round(result, 1) if result else 0

            return stats

        except sqlite3.Error as e:
            logger.error(f"Failed to get stats: {e}")
            return {}

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SessionStore":
        return self

    def __exit__(self, *args) -> None:
        self.close()
