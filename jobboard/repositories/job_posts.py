"""
Job Posts Repository.

Responsibilities:
- Insert job posts for a client user.
- Look up a post by id and/or client id.

Non-Responsibilities:
- No ownership or permission checks.

Invariant:
Filters combine with AND; a post is returned only if it matches all of them.
"""

from typing import Any, Dict, Optional

from sqlalchemy import and_, insert, select

from ..database import Database, JobPost
from ..errors import ValidationError
from ..logger import get_logger
from ..schema import parse_date, validate_job_post
from .base import db_operation

logger = get_logger()


class JobPostRepository:
    """Record operations over job posts. Every method returns a DbResponse."""

    def __init__(self, db: Database):
        self.db = db

    @db_operation()
    def insert_job_post(self, job_post: Dict[str, Any], client_id: int) -> Dict[str, Any]:
        """
        Insert a post owned by client_id.

        Returns:
            {"id", "created_at", "updated_at"} of the new row
        """
        errors = validate_job_post(job_post)
        if errors:
            raise ValidationError(errors)

        values = dict(job_post)
        if values.get("deadline") is not None:
            values["deadline"] = parse_date(values["deadline"])

        with self.db.transaction() as session:
            row = session.execute(
                insert(JobPost)
                .values(**values, client_id=client_id)
                .returning(JobPost.id, JobPost.created_at, JobPost.updated_at)
            ).mappings().one()
        logger.debug("Job post created", tag="database", job_post_id=row["id"], client_id=client_id)
        return dict(row)

    @db_operation()
    def get_job_post(
        self,
        *,
        id: Optional[int] = None,
        client_id: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """First post (lowest id) matching every supplied filter, or None."""
        conditions = []
        if id is not None:
            conditions.append(JobPost.id == id)
        if client_id is not None:
            conditions.append(JobPost.client_id == client_id)

        query = select(*JobPost.__table__.columns).order_by(JobPost.id).limit(1)
        if conditions:
            query = query.where(and_(*conditions))

        with self.db.session() as session:
            row = session.execute(query).mappings().first()
        return None if row is None else dict(row)
