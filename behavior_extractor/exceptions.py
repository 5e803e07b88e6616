"""
Custom exception hierarchy for the behavior extractor.

Precondition violations on session input are rejected with a descriptive
error naming the offending session; store failures get their own branch.
"""


class BehaviorExtractorError(Exception):
    """Base exception for all behavior extractor errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Session Input Exceptions
# =============================================================================


class InvalidSessionError(BehaviorExtractorError):
    """Raised when a session cannot be transformed."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        index: int | None = None,
    ):
        details = {}
        if session_id is not None:
            details["session_id"] = session_id
        if index is not None:
            details["index"] = index
        super().__init__(message, details=details)
        self.session_id = session_id
        self.index = index


class MissingUseCaseError(InvalidSessionError):
    """Raised when an execution record carries no use case."""

    def __init__(self, session_id: str, index: int):
        super().__init__(
            f"Execution #{index} of session \"{session_id}\" has no use case",
            session_id=session_id,
            index=index,
        )


class MissingUseCaseIdError(InvalidSessionError):
    """Raised when a use case has no identifier."""

    def __init__(self, session_id: str | None, index: int | None, name: str = ""):
        where = f"session \"{session_id}\"" if session_id is not None else "default use cases"
        super().__init__(
            f"Use case \"{name}\" at position {index} in {where} has no identifier",
            session_id=session_id,
            index=index,
        )


class InvalidStartTimeError(InvalidSessionError):
    """Raised when an execution start time is not an integer timestamp."""

    def __init__(self, session_id: str, index: int, start_time: object):
        super().__init__(
            f"Execution #{index} of session \"{session_id}\" has invalid start time {start_time!r}",
            session_id=session_id,
            index=index,
        )
        self.details["start_time"] = repr(start_time)


# =============================================================================
# Store Exceptions
# =============================================================================


class StoreError(BehaviorExtractorError):
    """Base exception for session store errors."""
    pass


class StoreDatabaseError(StoreError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, cause: str):
        super().__init__(
            f"Store database error during {operation}: {cause}",
            details={"operation": operation, "cause": cause},
        )
