"""
Tests for schema validation.
"""

from datetime import date, datetime

import pytest
from jobboard.schema import (
    is_array_unique,
    is_phone_number,
    parse_date,
    validate_education_degree,
    validate_job_post,
    validate_portfolio,
    validate_user_update,
    validate_work_experience,
)


class TestValidateEducationDegree:
    """Test the four-field education degree shape."""

    def test_valid_degree(self, education_degree):
        assert validate_education_degree(education_degree) == []

    def test_open_ended_degree(self, education_degree):
        education_degree["end_date"] = None
        assert validate_education_degree(education_degree) == []

    def test_extra_field_rejected(self):
        """An unrecognized field makes the object invalid."""
        data = {
            "user_id": 1,
            "title": "BSc",
            "start_date": "2020-01-01",
            "end_date": None,
            "extra": "x",
        }
        errors = validate_education_degree(data)
        assert any("extra" in err for err in errors)

    def test_missing_end_date_rejected(self, education_degree):
        """end_date must be present even when null."""
        del education_degree["end_date"]
        errors = validate_education_degree(education_degree)
        assert any("end_date" in err for err in errors)

    def test_bad_date_rejected(self, education_degree):
        education_degree["start_date"] = "last spring"
        errors = validate_education_degree(education_degree)
        assert any("start_date" in err for err in errors)

    def test_end_before_start_rejected(self, education_degree):
        education_degree["end_date"] = "2010-01-01"
        errors = validate_education_degree(education_degree)
        assert any("before" in err for err in errors)

    def test_bool_user_id_rejected(self, education_degree):
        education_degree["user_id"] = True
        assert validate_education_degree(education_degree)

    def test_non_object_rejected(self):
        assert validate_education_degree(["BSc"])


class TestValidateWorkExperience:
    """Test the five-field work experience shape."""

    def test_valid_experience(self, work_experience):
        assert validate_work_experience(work_experience) == []

    def test_extra_field_rejected(self, work_experience):
        work_experience["salary"] = 1000
        errors = validate_work_experience(work_experience)
        assert any("salary" in err for err in errors)

    def test_missing_company_rejected(self, work_experience):
        del work_experience["company"]
        errors = validate_work_experience(work_experience)
        assert any("company" in err for err in errors)

    def test_empty_job_title_rejected(self, work_experience):
        work_experience["job_title"] = "  "
        errors = validate_work_experience(work_experience)
        assert any("job_title" in err for err in errors)

    def test_datetime_start_compared_as_date(self, work_experience):
        """A datetime start and a date end compare by calendar day."""
        work_experience["start_date"] = datetime(2020, 1, 1, 9, 0)
        work_experience["end_date"] = date(2021, 1, 1)
        assert validate_work_experience(work_experience) == []

        work_experience["end_date"] = date(2019, 12, 31)
        errors = validate_work_experience(work_experience)
        assert any("before" in err for err in errors)


class TestValidatePortfolio:
    """Test portfolio validation and its skill tags."""

    def test_valid_portfolio(self, portfolio):
        assert validate_portfolio(portfolio) == []

    def test_optional_fields_may_be_omitted(self, portfolio):
        del portfolio["description"]
        del portfolio["link"]
        assert validate_portfolio(portfolio) == []

    def test_empty_skills_rejected(self, portfolio):
        portfolio["skills"] = []
        assert any("skills" in err for err in validate_portfolio(portfolio))

    def test_skill_too_long_rejected(self, portfolio):
        portfolio["skills"] = ["A" * 31]
        assert validate_portfolio(portfolio)

    def test_skill_of_thirty_chars_accepted(self, portfolio):
        portfolio["skills"] = ["A" * 30]
        assert validate_portfolio(portfolio) == []

    def test_empty_skill_rejected(self, portfolio):
        portfolio["skills"] = ["Python", ""]
        assert validate_portfolio(portfolio)

    def test_unknown_field_rejected(self, portfolio):
        portfolio["stars"] = 5
        assert any("stars" in err for err in validate_portfolio(portfolio))


class TestValidateUserUpdate:
    """Test whole update payloads."""

    def test_valid_payload(self, education_degree):
        values = {
            "name": "Ada",
            "bio": "Engineer",
            "phone_number": "09123456789",
            "skills": ["Go", "SQL"],
            "education_degrees": [education_degree],
        }
        assert validate_user_update(values) == []

    def test_unknown_field_rejected(self):
        errors = validate_user_update({"role_id": 3})
        assert any("role_id" in err for err in errors)

    def test_timestamps_not_updatable(self):
        assert validate_user_update({"created_at": "2020-01-01"})

    def test_duplicate_skills_rejected(self):
        errors = validate_user_update({"skills": ["Go", "Go"]})
        assert any("duplicates" in err for err in errors)

    def test_empty_collections_allowed(self):
        assert validate_user_update({"skills": [], "portfolios": []}) == []

    def test_none_collection_counts_as_absent(self):
        assert validate_user_update({"skills": None}) == []

    def test_bad_phone_number_rejected(self):
        errors = validate_user_update({"phone_number": "12345"})
        assert any("phone_number" in err for err in errors)

    def test_empty_name_rejected(self):
        assert validate_user_update({"name": ""})

    def test_bad_birth_date_rejected(self):
        assert validate_user_update({"birth_date": "31/12/1990"})

    def test_nested_errors_reported(self, work_experience):
        work_experience["extra"] = "x"
        errors = validate_user_update({"work_experiences": [work_experience]})
        assert any("extra" in err for err in errors)


class TestValidateJobPost:
    """Test job post content validation."""

    def test_valid_job_post(self, valid_job_post):
        assert validate_job_post(valid_job_post) == []

    def test_missing_title(self, valid_job_post):
        del valid_job_post["title"]
        errors = validate_job_post(valid_job_post)
        assert any("title" in err for err in errors)

    def test_negative_budget(self, valid_job_post):
        valid_job_post["budget"] = -1
        assert validate_job_post(valid_job_post)

    def test_client_id_is_not_content(self, valid_job_post):
        valid_job_post["client_id"] = 1
        assert any("client_id" in err for err in validate_job_post(valid_job_post))


class TestHelpers:
    """Test small predicates."""

    @pytest.mark.parametrize("value", ["", "09123456789"])
    def test_valid_phone_numbers(self, value):
        assert is_phone_number(value)

    @pytest.mark.parametrize("value", ["9123456789", "0912345678", "091234567890", "08123456789"])
    def test_invalid_phone_numbers(self, value):
        assert not is_phone_number(value)

    def test_array_unique(self):
        assert is_array_unique(["a", "b"])
        assert not is_array_unique(["a", "b", "a"])

    def test_parse_date(self):
        assert parse_date("2020-01-31").isoformat() == "2020-01-31"
        assert parse_date("not a date") is None
        assert parse_date(None) is None
        assert parse_date(datetime(2020, 1, 31, 23, 59)) == date(2020, 1, 31)
