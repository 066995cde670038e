"""
Database schema and connection management.

Uses SQLAlchemy over a single pooled engine per process. PostgreSQL in
deployment, SQLite for local runs and tests.
"""

import sys
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
    func,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .env import get_database_url, get_float, get_int, load_env
from .errors import DatabaseClosedError
from .logger import get_logger

logger = get_logger()

Base = declarative_base()

DEFAULT_ROLE_ID = 1
DEFAULT_ROLES = ("user", "client", "admin")  # ids 1..3, "user" is the registration default
DEFAULT_GENDERS = ("male", "female")


class Role(Base):
    """Lookup table for user roles."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True)
    role_name = Column(String(32), nullable=False, unique=True)


class Gender(Base):
    """Lookup table for genders."""

    __tablename__ = "genders"

    id = Column(Integer, primary_key=True)
    gender_name = Column(String(32), nullable=False, unique=True)


class User(Base):
    """User profile model. Owns the six user_* collections below."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # already hashed by the caller
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, default=DEFAULT_ROLE_ID)
    gender_id = Column(Integer, ForeignKey("genders.id"), nullable=True)
    phone_number = Column(String(16), nullable=True)
    postal_code = Column(String(16), nullable=True)
    home_address = Column(Text, nullable=True)
    job_title = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    birth_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
    last_login_at = Column(DateTime, nullable=True, server_default=func.now())


class UserSkill(Base):
    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    skill = Column(String(64), nullable=False)


class UserLanguage(Base):
    __tablename__ = "user_languages"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    language_name = Column(String(64), nullable=False)


class UserSocialLink(Base):
    __tablename__ = "user_social_links"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    link = Column(String(512), nullable=False)


class UserEducationDegree(Base):
    __tablename__ = "user_education_degrees"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # null while still studying


class UserWorkExperience(Base):
    __tablename__ = "user_work_experiences"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_title = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # null for the current job


class UserPortfolio(Base):
    __tablename__ = "user_portfolios"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    link = Column(String(512), nullable=True)
    skills = Column(JSON, nullable=False)  # non-empty list of tags, 1-30 chars each


class JobPost(Base):
    """Job posting published by a client user."""

    __tablename__ = "job_posts"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    budget = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the process-wide engine (and its connection pool).

    Every unit of work goes through session() or transaction(), which
    count in-flight operations so close() can drain them before the
    pool is disposed. There is no reconnect or health-check logic.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        drain_timeout: float = 10.0,
        echo: bool = False,
    ):
        """
        Create the engine.

        Args:
            url: SQLAlchemy database URL (DSN)
            pool_size: Persistent connections kept by the pool (ignored for SQLite)
            max_overflow: Extra connections allowed under load (ignored for SQLite)
            drain_timeout: Seconds close() waits for in-flight work by default
            echo: Log emitted SQL
        """
        engine_kwargs = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)

        self.url = url
        self.drain_timeout = drain_timeout
        self.engine = create_engine(url, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        self._cond = threading.Condition()
        self._in_flight = 0
        self._closing = False
        self._closed = False

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def _track(self) -> Iterator[None]:
        with self._cond:
            if self._closing:
                raise DatabaseClosedError("Database connection is closed")
            self._in_flight += 1
        try:
            yield
        finally:
            with self._cond:
                self._in_flight -= 1
                self._cond.notify_all()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session for reads; nothing is committed."""
        with self._track(), self.session_factory() as session:
            yield session

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Session inside one transaction: commit on success, rollback on any exception."""
        with self._track(), self.session_factory() as session, session.begin():
            logger.record_transaction()
            yield session

    def close(self, timeout: Optional[float] = None) -> bool:
        """
        Stop accepting work, wait for in-flight operations, dispose the pool.

        Args:
            timeout: Seconds to wait (default: drain_timeout)

        Returns:
            True if everything drained before the pool was disposed
        """
        timeout = self.drain_timeout if timeout is None else timeout
        with self._cond:
            if self._closing:
                return True
            self._closing = True
            drained = self._cond.wait_for(lambda: self._in_flight == 0, timeout=timeout)
            self._closed = True

        if not drained:
            logger.warning(
                "Closing with operations still in flight",
                tag="database",
                in_flight=self.in_flight,
                timeout=timeout,
            )
        self.engine.dispose()
        logger.info("Connection closed", tag="database")
        return drained


def init_database(db: Database) -> None:
    """
    Create tables and seed the role/gender lookup rows.

    Args:
        db: Connected Database
    """
    Base.metadata.create_all(db.engine)
    with db.transaction() as session:
        existing_roles = set(session.scalars(select(Role.role_name)))
        for role_id, role_name in enumerate(DEFAULT_ROLES, start=1):
            if role_name not in existing_roles:
                session.add(Role(id=role_id, role_name=role_name))

        existing_genders = set(session.scalars(select(Gender.gender_name)))
        for gender_id, gender_name in enumerate(DEFAULT_GENDERS, start=1):
            if gender_name not in existing_genders:
                session.add(Gender(id=gender_id, gender_name=gender_name))
    logger.info("Schema ready", tag="database")


def connect_db() -> Database:
    """
    Build the process-wide Database from the environment.

    Exits the process with status 1 when DATABASE_URL is not configured.
    """
    load_env()
    url = get_database_url()
    if url is None:
        logger.critical("Database URL is empty, check the .env file", tag="database")
        logger.critical("Exiting due to no database connection", tag="server")
        sys.exit(1)

    db = Database(
        url,
        pool_size=get_int("DB_POOL_SIZE", 5),
        max_overflow=get_int("DB_MAX_OVERFLOW", 10),
        drain_timeout=get_float("DB_DRAIN_TIMEOUT", 10.0),
    )
    logger.info("Connected via SQLAlchemy", tag="database", dialect=db.engine.dialect.name)
    return db


def disconnect_db(db: Database, timeout: Optional[float] = None) -> bool:
    """Close the pool after draining in-flight work."""
    return db.close(timeout=timeout)
