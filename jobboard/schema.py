import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

EDUCATION_DEGREE_FIELDS = ("user_id", "title", "start_date", "end_date")
WORK_EXPERIENCE_FIELDS = ("user_id", "job_title", "company", "start_date", "end_date")
PORTFOLIO_REQUIRED_FIELDS = ("user_id", "title", "skills")
PORTFOLIO_OPTIONAL_FIELDS = ("description", "link")

STRING_COLLECTIONS = ("skills", "language_names", "social_links")
OBJECT_COLLECTIONS = ("education_degrees", "work_experiences", "portfolios")
COLLECTION_FIELDS = STRING_COLLECTIONS + OBJECT_COLLECTIONS

# Scalar user columns an update may touch; role, ids and timestamps are not among them.
UPDATABLE_USER_FIELDS = (
    "name",
    "email",
    "hashed_password",
    "gender_id",
    "phone_number",
    "postal_code",
    "home_address",
    "job_title",
    "bio",
    "birth_date",
)

PORTFOLIO_SKILL_MAX_LENGTH = 30

_PHONE_NUMBER_RE = re.compile(r"^09\d{9}$")


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def parse_date(v: Any) -> Optional[date]:
    """Return v as a date, or None when it is neither a date nor an ISO date string."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        try:
            return date.fromisoformat(v)
        except ValueError:
            return None
    return None


def _check_exact_keys(data: Dict[str, Any], fields: Sequence[str], label: str) -> List[str]:
    errors = []
    for f in fields:
        if f not in data:
            errors.append(f"{label}: missing field '{f}'")
    for f in data:
        if f not in fields:
            errors.append(f"{label}: unexpected field '{f}'")
    return errors


def _check_date_range(data: Dict[str, Any], label: str) -> List[str]:
    errors = []
    start = parse_date(data.get("start_date"))
    if "start_date" in data and start is None:
        errors.append(f"{label}: 'start_date' must be an ISO date")
    end_raw = data.get("end_date")
    end = parse_date(end_raw)
    if end_raw is not None and end is None:
        errors.append(f"{label}: 'end_date' must be an ISO date or null")
    if start is not None and end is not None and end < start:
        errors.append(f"{label}: 'end_date' is before 'start_date'")
    return errors


def validate_education_degree(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    An education degree carries exactly user_id, title, start_date, end_date.
    """
    label = "education degree"
    if not isinstance(data, dict):
        return [f"{label}: must be an object"]

    errors = _check_exact_keys(data, EDUCATION_DEGREE_FIELDS, label)
    if "user_id" in data and not _is_int(data["user_id"]):
        errors.append(f"{label}: 'user_id' must be an integer")
    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append(f"{label}: 'title' must be a non-empty string")
    errors.extend(_check_date_range(data, label))
    return errors


def validate_work_experience(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    A work experience carries exactly user_id, job_title, company,
    start_date, end_date.
    """
    label = "work experience"
    if not isinstance(data, dict):
        return [f"{label}: must be an object"]

    errors = _check_exact_keys(data, WORK_EXPERIENCE_FIELDS, label)
    if "user_id" in data and not _is_int(data["user_id"]):
        errors.append(f"{label}: 'user_id' must be an integer")
    for f in ("job_title", "company"):
        if f in data and not _is_non_empty_str(data[f]):
            errors.append(f"{label}: '{f}' must be a non-empty string")
    errors.extend(_check_date_range(data, label))
    return errors


def validate_portfolio_skills(skills: Any) -> List[str]:
    if not isinstance(skills, list) or not skills:
        return ["portfolio: 'skills' must be a non-empty list"]
    errors = []
    for skill in skills:
        if not isinstance(skill, str) or not 1 <= len(skill) <= PORTFOLIO_SKILL_MAX_LENGTH:
            errors.append(
                f"portfolio: skill tags must be strings of 1-{PORTFOLIO_SKILL_MAX_LENGTH} characters"
            )
            break
    return errors


def validate_portfolio(data: Any) -> List[str]:
    label = "portfolio"
    if not isinstance(data, dict):
        return [f"{label}: must be an object"]

    errors = []
    for f in PORTFOLIO_REQUIRED_FIELDS:
        if f not in data:
            errors.append(f"{label}: missing field '{f}'")
    for f in data:
        if f not in PORTFOLIO_REQUIRED_FIELDS + PORTFOLIO_OPTIONAL_FIELDS:
            errors.append(f"{label}: unexpected field '{f}'")
    if "user_id" in data and not _is_int(data["user_id"]):
        errors.append(f"{label}: 'user_id' must be an integer")
    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append(f"{label}: 'title' must be a non-empty string")
    for f in PORTFOLIO_OPTIONAL_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"{label}: '{f}' must be a string if provided")
    if "skills" in data:
        errors.extend(validate_portfolio_skills(data["skills"]))
    return errors


def is_array_unique(items: Sequence[Any]) -> bool:
    seen = []
    for item in items:
        if item in seen:
            return False
        seen.append(item)
    return True


def is_phone_number(value: str) -> bool:
    """Empty string clears the number and is allowed."""
    if value == "":
        return True
    return bool(_PHONE_NUMBER_RE.match(value))


def validate_string_collection(name: str, values: Any) -> List[str]:
    if not isinstance(values, list):
        return [f"Field '{name}' must be a list"]
    errors = []
    if not all(_is_non_empty_str(v) for v in values):
        errors.append(f"Field '{name}' must only contain non-empty strings")
    elif not is_array_unique(values):
        errors.append(f"Field '{name}' must not contain duplicates")
    return errors


_OBJECT_VALIDATORS = {
    "education_degrees": validate_education_degree,
    "work_experiences": validate_work_experience,
    "portfolios": validate_portfolio,
}


def validate_user_update(values: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for an update payload.
    Empty list means valid.

    Object collection items are expected to already carry the owner's
    user_id. A collection set to None counts as not supplied.
    """
    errors: List[str] = []

    for f in values:
        if f not in UPDATABLE_USER_FIELDS and f not in COLLECTION_FIELDS:
            errors.append(f"Field '{f}' cannot be updated")

    for f in ("name", "email", "hashed_password"):
        if f in values and not _is_non_empty_str(values[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    if values.get("gender_id") is not None and not _is_int(values["gender_id"]):
        errors.append("Field 'gender_id' must be an integer or null")

    for f in ("postal_code", "home_address", "job_title", "bio"):
        if values.get(f) is not None and not isinstance(values[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    phone = values.get("phone_number")
    if phone is not None and (not isinstance(phone, str) or not is_phone_number(phone)):
        errors.append("Field 'phone_number' must look like 09XXXXXXXXX")

    if values.get("birth_date") is not None and parse_date(values["birth_date"]) is None:
        errors.append("Field 'birth_date' must be an ISO date")

    for f in STRING_COLLECTIONS:
        if values.get(f) is not None:
            errors.extend(validate_string_collection(f, values[f]))

    for f, validator in _OBJECT_VALIDATORS.items():
        items = values.get(f)
        if items is None:
            continue
        if not isinstance(items, list):
            errors.append(f"Field '{f}' must be a list")
            continue
        for item in items:
            errors.extend(validator(item))

    return errors


JOB_POST_REQUIRED_FIELDS = ("title", "description")
JOB_POST_OPTIONAL_FIELDS = ("budget", "deadline")


def validate_job_post(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    The client id travels separately and is not part of the content.
    """
    if not isinstance(data, dict):
        return ["job post: must be an object"]

    errors = []
    for f in JOB_POST_REQUIRED_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
    for f in data:
        if f not in JOB_POST_REQUIRED_FIELDS + JOB_POST_OPTIONAL_FIELDS:
            errors.append(f"Field '{f}' is not part of a job post")

    budget = data.get("budget")
    if budget is not None and (isinstance(budget, bool) or not isinstance(budget, (int, float)) or budget < 0):
        errors.append("Field 'budget' must be a non-negative number")
    if data.get("deadline") is not None and parse_date(data["deadline"]) is None:
        errors.append("Field 'deadline' must be an ISO date")
    return errors
