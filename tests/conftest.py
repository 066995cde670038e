"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Dict, Any

from jobboard.database import Database, init_database
from jobboard.repositories import JobPostRepository, UserRepository


@pytest.fixture
def db(tmp_path):
    """Create a temporary SQLite database with tables and lookup rows."""
    database = Database(f"sqlite:///{tmp_path / 'test.db'}", drain_timeout=1.0)
    init_database(database)
    yield database
    database.close(timeout=0)


@pytest.fixture
def users(db) -> UserRepository:
    return UserRepository(db)


@pytest.fixture
def job_posts(db) -> JobPostRepository:
    return JobPostRepository(db)


@pytest.fixture
def user_id(users) -> int:
    """Id of a freshly registered user."""
    result, error = users.insert_user("Ada Lovelace", "ada@example.com", "$2b$10$hashedpassword")
    assert error is None
    return result


@pytest.fixture
def client_id(users) -> int:
    """Id of a second registered user acting as a client."""
    result, error = users.insert_user("Acme Hiring", "hiring@acme.example", "$2b$10$otherhash")
    assert error is None
    return result


@pytest.fixture
def education_degree() -> Dict[str, Any]:
    return {
        "user_id": 1,
        "title": "BSc Computer Science",
        "start_date": "2016-09-01",
        "end_date": "2020-06-30",
    }


@pytest.fixture
def work_experience() -> Dict[str, Any]:
    return {
        "user_id": 1,
        "job_title": "Backend Developer",
        "company": "Acme Corp",
        "start_date": "2020-08-01",
        "end_date": None,
    }


@pytest.fixture
def portfolio() -> Dict[str, Any]:
    return {
        "user_id": 1,
        "title": "Payments API",
        "description": "Ledger service for a marketplace",
        "link": "https://example.com/payments",
        "skills": ["Python", "PostgreSQL"],
    }


@pytest.fixture
def valid_job_post() -> Dict[str, Any]:
    return {
        "title": "Build a landing page",
        "description": "Single page with a signup form.",
        "budget": 250,
        "deadline": "2026-12-01",
    }
