"""
Replace-set synchronization of a user's dependent collections.

Responsibilities:
- Delete every row a user owns in a collection, then insert the new set.
- Stamp each inserted row with the owning user id.

Non-Responsibilities:
- No transaction management; callers pass a session already inside one.
- No validation.
- No error handling: storage errors must reach the caller so the
  enclosing transaction rolls back.

Invariant:
None leaves a collection untouched; an empty list clears it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

from .database import (
    UserEducationDegree,
    UserLanguage,
    UserPortfolio,
    UserSkill,
    UserSocialLink,
    UserWorkExperience,
)
from .schema import parse_date


@dataclass(frozen=True)
class CollectionSpec:
    """How one logical collection maps onto its child table."""

    name: str
    model: Any
    to_row: Callable[[int, Any], Dict[str, Any]]


def _text_row(column: str) -> Callable[[int, Any], Dict[str, Any]]:
    def to_row(user_id: int, value: Any) -> Dict[str, Any]:
        return {"user_id": user_id, column: value}
    return to_row


def _education_row(user_id: int, value: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "title": value["title"],
        "start_date": parse_date(value["start_date"]),
        "end_date": parse_date(value.get("end_date")),
    }


def _work_row(user_id: int, value: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "job_title": value["job_title"],
        "company": value["company"],
        "start_date": parse_date(value["start_date"]),
        "end_date": parse_date(value.get("end_date")),
    }


def _portfolio_row(user_id: int, value: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "title": value["title"],
        "description": value.get("description"),
        "link": value.get("link"),
        "skills": list(value["skills"]),
    }


COLLECTIONS: Sequence[CollectionSpec] = (
    CollectionSpec("skills", UserSkill, _text_row("skill")),
    CollectionSpec("language_names", UserLanguage, _text_row("language_name")),
    CollectionSpec("social_links", UserSocialLink, _text_row("link")),
    CollectionSpec("education_degrees", UserEducationDegree, _education_row),
    CollectionSpec("work_experiences", UserWorkExperience, _work_row),
    CollectionSpec("portfolios", UserPortfolio, _portfolio_row),
)


def replace_collection(
    session: Session,
    spec: CollectionSpec,
    user_id: int,
    values: Optional[List[Any]],
) -> bool:
    """
    Replace one collection of a user.

    Args:
        session: Session inside the caller's transaction
        spec: Which collection
        user_id: Owning user
        values: New members; None to leave the collection alone

    Returns:
        True if the collection was touched
    """
    if values is None:
        return False

    rows = [spec.to_row(user_id, value) for value in values]

    session.execute(
        delete(spec.model)
        .where(spec.model.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    if rows:
        session.execute(insert(spec.model), rows)
    return True


def sync_collections(session: Session, user_id: int, payload: Dict[str, Any]) -> List[str]:
    """
    Replace every collection present in payload, in COLLECTIONS order.

    Returns:
        Names of the collections that were replaced
    """
    replaced = []
    for spec in COLLECTIONS:
        if replace_collection(session, spec, user_id, payload.get(spec.name)):
            replaced.append(spec.name)
    return replaced
