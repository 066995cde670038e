"""
Projection builder for user records.

Maps every logical user field to the column or correlated subquery that
produces it, then assembles the minimal select for a requested field
list. The six collections come back as JSON arrays ordered by child row
id, so results follow insertion order and are reproducible.
"""

from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import JSON, literal, select
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.elements import ColumnElement, Label
from sqlalchemy.sql.functions import FunctionElement

from .database import (
    Gender,
    Role,
    User,
    UserEducationDegree,
    UserLanguage,
    UserPortfolio,
    UserSkill,
    UserSocialLink,
    UserWorkExperience,
)
from .errors import UnknownFieldError

WILDCARD = "all"
ALWAYS_FIELDS = ("id", "role_name")
PRIVILEGED_FIELDS = ("hashed_password",)
DEFAULT_FIELDS = ("name", "email", "created_at", "updated_at", "last_login_at")


class json_array_agg(FunctionElement):
    """json_array_agg(value, order_by): JSON array of value, ordered, '[]' when empty."""

    type = JSON()
    name = "json_array_agg"
    inherit_cache = True


@compiles(json_array_agg)
def _json_array_agg_default(element, compiler, **kw):
    value, order_by = list(element.clauses)
    return "coalesce(json_agg(%s ORDER BY %s), '[]'::json)" % (
        compiler.process(value, **kw),
        compiler.process(order_by, **kw),
    )


@compiles(json_array_agg, "sqlite")
def _json_array_agg_sqlite(element, compiler, **kw):
    # json_group_array follows scan order, which is rowid order for the user_id index
    value, _ = list(element.clauses)
    return "coalesce(json_group_array(%s), '[]')" % compiler.process(value, **kw)


class json_object_build(FunctionElement):
    """json_object_build(key1, value1, key2, value2, ...)"""

    type = JSON()
    name = "json_object_build"
    inherit_cache = True


@compiles(json_object_build)
def _json_object_build_default(element, compiler, **kw):
    return "json_build_object(%s)" % compiler.process(element.clauses, **kw)


@compiles(json_object_build, "sqlite")
def _json_object_build_sqlite(element, compiler, **kw):
    return "json_object(%s)" % compiler.process(element.clauses, **kw)


class json_embed(FunctionElement):
    """Nest a JSON column inside a built object instead of quoting it as text."""

    type = JSON()
    name = "json_embed"
    inherit_cache = True


@compiles(json_embed)
def _json_embed_default(element, compiler, **kw):
    return compiler.process(element.clauses, **kw)


@compiles(json_embed, "sqlite")
def _json_embed_sqlite(element, compiler, **kw):
    return "json(%s)" % compiler.process(element.clauses, **kw)


def _object(model, *fields: str) -> ColumnElement:
    args = []
    for f in fields:
        column = getattr(model, f)
        if isinstance(column.type, JSON):
            column = json_embed(column)
        args.extend((literal(f), column))
    return json_object_build(*args)


def _collection(model, value: ColumnElement) -> ColumnElement:
    return (
        select(json_array_agg(value, model.id))
        .where(model.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )


def skills_query():
    return _collection(UserSkill, UserSkill.skill)


def language_names_query():
    return _collection(UserLanguage, UserLanguage.language_name)


def social_links_query():
    return _collection(UserSocialLink, UserSocialLink.link)


def education_degrees_query():
    return _collection(
        UserEducationDegree,
        _object(UserEducationDegree, "title", "start_date", "end_date"),
    )


def work_experiences_query():
    return _collection(
        UserWorkExperience,
        _object(UserWorkExperience, "job_title", "company", "start_date", "end_date"),
    )


def portfolios_query():
    return _collection(
        UserPortfolio,
        _object(UserPortfolio, "title", "description", "link", "skills"),
    )


# Logical field name -> expression factory, in output order
FIELD_EXPRESSIONS: Dict[str, Callable[[], ColumnElement]] = {
    "id": lambda: User.id,
    "role_name": lambda: Role.role_name,
    "name": lambda: User.name,
    "email": lambda: User.email,
    "hashed_password": lambda: User.password,
    "skills": skills_query,
    "language_names": language_names_query,
    "social_links": social_links_query,
    "education_degrees": education_degrees_query,
    "work_experiences": work_experiences_query,
    "portfolios": portfolios_query,
    "phone_number": lambda: User.phone_number,
    "postal_code": lambda: User.postal_code,
    "home_address": lambda: User.home_address,
    "gender_name": lambda: Gender.gender_name,
    "job_title": lambda: User.job_title,
    "bio": lambda: User.bio,
    "birth_date": lambda: User.birth_date,
    "created_at": lambda: User.created_at,
    "updated_at": lambda: User.updated_at,
    "last_login_at": lambda: User.last_login_at,
}


def resolve_fields(fields: Optional[Iterable[str]], get_password: bool = False) -> List[str]:
    """
    Turn a requested field list into the ordered list of fields to select.

    None means DEFAULT_FIELDS. The wildcard expands to every field, but the
    password hash still needs get_password. Unknown names raise
    UnknownFieldError.
    """
    requested = set(DEFAULT_FIELDS if fields is None else fields)
    everything = WILDCARD in requested
    requested.discard(WILDCARD)

    unknown = sorted(requested - FIELD_EXPRESSIONS.keys())
    if unknown:
        raise UnknownFieldError(unknown)

    selected = []
    for name in FIELD_EXPRESSIONS:
        if name in ALWAYS_FIELDS:
            selected.append(name)
        elif name in PRIVILEGED_FIELDS:
            if get_password and (everything or name in requested):
                selected.append(name)
        elif everything or name in requested:
            selected.append(name)
    return selected


def build_projection(fields: Optional[Iterable[str]], get_password: bool = False) -> List[Label]:
    return [FIELD_EXPRESSIONS[name]().label(name) for name in resolve_fields(fields, get_password)]


def full_projection() -> List[Label]:
    """Every field except the password hash."""
    return build_projection([WILDCARD], get_password=False)


def build_user_query(projection: List[Label], where: ColumnElement):
    return (
        select(*projection)
        .select_from(User)
        .join(Role, User.role_id == Role.id)
        .outerjoin(Gender, User.gender_id == Gender.id)
        .where(where)
    )
