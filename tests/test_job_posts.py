"""
Tests for the job posts repository.
"""

from datetime import date, datetime

from sqlalchemy.exc import IntegrityError

from jobboard.errors import ValidationError
from jobboard.repositories import DbResponse


class TestInsertJobPost:
    """Test creating posts."""

    def test_returns_id_and_timestamps(self, job_posts, client_id, valid_job_post):
        result, error = job_posts.insert_job_post(valid_job_post, client_id)

        assert error is None
        assert set(result) == {"id", "created_at", "updated_at"}
        assert isinstance(result["created_at"], datetime)
        assert isinstance(result["updated_at"], datetime)

    def test_stores_content(self, job_posts, client_id, valid_job_post):
        created, _ = job_posts.insert_job_post(valid_job_post, client_id)

        post, error = job_posts.get_job_post(id=created["id"])

        assert error is None
        assert post["client_id"] == client_id
        assert post["title"] == "Build a landing page"
        assert post["budget"] == 250
        assert post["deadline"] == date(2026, 12, 1)

    def test_unknown_client_is_storage_error(self, job_posts, valid_job_post):
        result, error = job_posts.insert_job_post(valid_job_post, 999)

        assert result is None
        assert isinstance(error, IntegrityError)

    def test_invalid_content_rejected(self, job_posts, client_id):
        result, error = job_posts.insert_job_post({"title": "No description"}, client_id)

        assert result is None
        assert isinstance(error, ValidationError)


class TestGetJobPost:
    """Test lookups by id and client id."""

    def _two_posts(self, job_posts, user_id, client_id, valid_job_post):
        first, _ = job_posts.insert_job_post(valid_job_post, client_id)
        second, _ = job_posts.insert_job_post(dict(valid_job_post, title="Write API docs"), user_id)
        return first["id"], second["id"]

    def test_filters_combine_with_and(self, job_posts, user_id, client_id, valid_job_post):
        """id and client_id must both match."""
        first, second = self._two_posts(job_posts, user_id, client_id, valid_job_post)

        post, error = job_posts.get_job_post(id=second, client_id=user_id)
        assert error is None
        assert post["id"] == second

        assert job_posts.get_job_post(id=second, client_id=client_id) == DbResponse(None, None)
        assert job_posts.get_job_post(id=first, client_id=user_id) == DbResponse(None, None)

    def test_by_client_id(self, job_posts, user_id, client_id, valid_job_post):
        first, _ = self._two_posts(job_posts, user_id, client_id, valid_job_post)

        post, _ = job_posts.get_job_post(client_id=client_id)

        assert post["id"] == first

    def test_first_match_is_lowest_id(self, job_posts, client_id, valid_job_post):
        first, _ = job_posts.insert_job_post(valid_job_post, client_id)
        job_posts.insert_job_post(dict(valid_job_post, title="Second"), client_id)

        post, _ = job_posts.get_job_post(client_id=client_id)

        assert post["id"] == first["id"]

    def test_not_found(self, job_posts, client_id):
        assert job_posts.get_job_post(id=42) == DbResponse(None, None)
