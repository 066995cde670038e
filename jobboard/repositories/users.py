"""
Users Repository.

Responsibilities:
- Existence check, registration insert, last-login stamp.
- Partial reads through the projection builder.
- Transactional updates of scalar columns plus dependent collections.

Non-Responsibilities:
- No password hashing.
- No authentication decisions.

Invariant:
An update either lands completely (scalars and every supplied
collection) or not at all.
"""

from typing import Any, Dict, Iterable, Optional

from sqlalchemy import func, insert, select, update

from ..database import DEFAULT_ROLE_ID, Database, User
from ..errors import LookupConflictError, ValidationError
from ..logger import get_logger
from ..projection import build_projection, build_user_query, full_projection
from ..schema import COLLECTION_FIELDS, OBJECT_COLLECTIONS, parse_date, validate_user_update
from ..sync import sync_collections
from .base import db_operation

logger = get_logger()

# Logical field -> users column, where the names differ
_COLUMN_NAMES = {"hashed_password": "password"}


def lookup_predicate(user_id: Optional[int] = None, email: Optional[str] = None):
    """Equality predicate for exactly one of user_id or email."""
    if (user_id is None) == (email is None):
        raise LookupConflictError("Look a user up by exactly one of user_id or email")
    if user_id is not None:
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise LookupConflictError(f"user_id must be an integer, got {user_id!r}")
        return User.id == user_id
    if not isinstance(email, str):
        raise LookupConflictError(f"email must be a string, got {email!r}")
    return User.email == email


def split_update(user_id: int, values: Dict[str, Any]):
    """
    Split an update payload into (scalars, collections).

    Works on a copy. Object collection items get the owner's user_id
    stamped on, replacing whatever the caller put there.
    """
    scalars = dict(values)
    collections = {}
    for name in COLLECTION_FIELDS:
        if name not in scalars:
            continue
        items = scalars.pop(name)
        if items is None:
            continue
        if name in OBJECT_COLLECTIONS and isinstance(items, list):
            items = [{**item, "user_id": user_id} if isinstance(item, dict) else item for item in items]
        collections[name] = items
    return scalars, collections


def _scalar_columns(scalars: Dict[str, Any]) -> Dict[str, Any]:
    columns = {}
    for field, value in scalars.items():
        if field == "birth_date" and value is not None:
            value = parse_date(value)
        columns[_COLUMN_NAMES.get(field, field)] = value
    return columns


class UserRepository:
    """Record operations over users. Every method returns a DbResponse."""

    def __init__(self, db: Database):
        self.db = db

    @db_operation()
    def email_exists(self, email: str) -> Optional[Dict[str, int]]:
        """{"id": ...} of the user registered with email, or None."""
        with self.db.session() as session:
            user_id = session.scalar(select(User.id).where(User.email == email))
        return None if user_id is None else {"id": user_id}

    @db_operation()
    def insert_user(self, name: str, email: str, hashed_password: str) -> int:
        """Register a user with the default role; returns the new id."""
        with self.db.transaction() as session:
            user_id = session.scalar(
                insert(User)
                .values(name=name, email=email, password=hashed_password, role_id=DEFAULT_ROLE_ID)
                .returning(User.id)
            )
        logger.debug("User registered", tag="database", user_id=user_id)
        return user_id

    @db_operation()
    def update_last_login(self, user_id: int) -> Optional[bool]:
        """True once last_login_at is stamped, None if no such user."""
        with self.db.transaction() as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_login_at=func.now())
                .execution_options(synchronize_session=False)
            )
        return True if result.rowcount else None

    @db_operation()
    def get_user(
        self,
        fields: Optional[Iterable[str]] = None,
        *,
        user_id: Optional[int] = None,
        email: Optional[str] = None,
        get_password: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Read a partial user record.

        Args:
            fields: Logical field names, or ["all"]; None means the defaults
            user_id: Look up by id
            email: Look up by email (exactly one of user_id/email)
            get_password: Allow hashed_password into the result

        Returns:
            Dict keyed by field name, or None if no user matched
        """
        where = lookup_predicate(user_id, email)
        query = build_user_query(build_projection(fields, get_password), where)
        with self.db.session() as session:
            row = session.execute(query).mappings().first()
        return None if row is None else dict(row)

    @db_operation()
    def update_user(self, user_id: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update scalar columns and replace any supplied collections in one
        transaction, then return the refreshed full projection.

        A collection that is missing (or None) is left untouched; an
        empty list clears it. Returns None if the user does not exist.
        """
        scalars, collections = split_update(user_id, values)
        errors = validate_user_update({**scalars, **collections})
        if errors:
            raise ValidationError(errors)

        with self.db.transaction() as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(**_scalar_columns(scalars), updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            if not result.rowcount:
                return None

            replaced = sync_collections(session, user_id, collections)
            row = session.execute(
                build_user_query(full_projection(), User.id == user_id)
            ).mappings().first()

        logger.debug(
            "User updated",
            tag="database",
            user_id=user_id,
            fields=sorted(scalars),
            collections=replaced,
        )
        return dict(row)
