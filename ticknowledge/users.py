"""Default upload user and parsing of document-list parameters."""

import re
import uuid
from typing import NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError

from .models import User, UserRole

DEFAULT_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
DEFAULT_USER_EMAIL = "default@example.com"
DEFAULT_USER_NAME = "System Default User"

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ListParams(NamedTuple):
    """Pagination and filter values for listing uploaded documents."""

    limit: int
    offset: int
    uploaded_by: Optional[uuid.UUID]


def get_or_create_default_user(session):
    """Return the id of the default upload user, creating the user if missing."""
    user = session.get(User, DEFAULT_USER_ID)
    if user is not None:
        return user.id
    user = User(
        id=DEFAULT_USER_ID,
        email=DEFAULT_USER_EMAIL,
        name=DEFAULT_USER_NAME,
        role=UserRole.USER,
        is_active=True,
    )
    session.add(user)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    return user.id


def _as_int(value, default):
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and _INTEGER.fullmatch(value):
        return int(value)
    return default


def _as_uuid(value):
    if not isinstance(value, str) or not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def parse_list_params(body):
    """Read limit, offset and uploaded_by from a decoded JSON body.

    Missing or unusable values keep their defaults; a body that is not an
    object yields all defaults.
    """
    if not isinstance(body, dict):
        return ListParams(DEFAULT_LIMIT, DEFAULT_OFFSET, None)
    return ListParams(
        limit=_as_int(body.get("limit"), DEFAULT_LIMIT),
        offset=_as_int(body.get("offset"), DEFAULT_OFFSET),
        uploaded_by=_as_uuid(body.get("uploaded_by")),
    )