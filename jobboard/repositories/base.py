"""
Shared plumbing for repositories: the (result, error) response shape and
the decorator that turns storage failures into it.
"""

import functools
from typing import Any, Callable, NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import JobBoardError
from ..logger import get_logger

logger = get_logger()


class DbResponse(NamedTuple):
    """
    Outcome of a repository call.

    - result set, error None: success
    - result None, error set: failure
    - result None, error None: nothing matched
    """

    result: Any
    error: Optional[Exception]

    @property
    def ok(self) -> bool:
        return self.error is None


def make_db_response(result: Any, error: Optional[Exception] = None) -> DbResponse:
    return DbResponse(result, error)


def db_operation(name: Optional[str] = None):
    """
    Decorator for repository methods.

    The wrapped method returns its plain result; the wrapper returns a
    DbResponse. SQLAlchemyError and JobBoardError are caught, logged,
    counted and placed in the error slot. Nothing is retried.

    Example:
        @db_operation()
        def get_job_post(self, *, id=None, client_id=None):
            ...
    """
    def decorator(func: Callable) -> Callable:
        operation = name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> DbResponse:
            logger.record_operation_attempt(operation)
            try:
                result = func(*args, **kwargs)
            except (SQLAlchemyError, JobBoardError) as e:
                logger.record_operation_failure(operation, type(e).__name__)
                logger.error(
                    f"{operation} failed",
                    tag="database",
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return make_db_response(None, e)

            logger.record_operation_success(operation)
            return make_db_response(result, None)

        return wrapper
    return decorator
