"""
Errors raised inside the data layer.

Repositories never let these escape; they come back in the error slot
of a DbResponse next to any SQLAlchemyError from the engine.
"""

from typing import List, Optional


class JobBoardError(Exception):
    """Base class for errors produced by jobboard itself."""
    pass


class ValidationError(JobBoardError):
    """Input rejected before it reached storage."""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "; ".join(self.errors))


class LookupConflictError(JobBoardError):
    """A user lookup named both an id and an email, or neither."""
    pass


class UnknownFieldError(JobBoardError):
    """A requested projection field does not exist."""

    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        super().__init__(f"Unknown user fields: {', '.join(self.fields)}")


class DatabaseClosedError(JobBoardError):
    """The connection pool is shutting down or already closed."""
    pass
