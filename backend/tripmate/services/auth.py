"""
Caller identity.

Authentication happens upstream; the auth proxy forwards the verified user id
in a header (``X-User-Id`` by default). This module only turns that header
into a ``User`` row.
"""
import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from tripmate.config import get_settings
from tripmate.database import get_db
from tripmate.errors import AuthenticationError
from tripmate.models.user import User

logger = logging.getLogger(__name__)


def get_current_user_id(request: Request) -> str:
    header = get_settings().user_id_header
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise AuthenticationError("Authentication required")
    return user_id


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    return User.get_or_create(db, user_id)
