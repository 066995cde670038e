"""
repositories/ - Record operations
=================================
Each repository wraps one entity's queries and returns DbResponse
values instead of raising.
"""

from .base import DbResponse, db_operation, make_db_response
from .job_posts import JobPostRepository
from .users import UserRepository

__all__ = [
    "DbResponse",
    "JobPostRepository",
    "UserRepository",
    "db_operation",
    "make_db_response",
]
