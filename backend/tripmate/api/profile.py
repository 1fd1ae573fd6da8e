from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import re

from tripmate.database import get_db
from tripmate.errors import ValidationError
from tripmate.models.user import User
from tripmate.schemas.profile import ProfileUpdate, ProfileResponse
from tripmate.services.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 ()\-]{5,19}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _optional_text(value, field: str, code: str, max_length: int) -> str | None:
    """Blank clears the field; anything else must be a string of sane length."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", code)
    value = value.strip()
    if not value:
        return None
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", code)
    return value


@router.get("", response_model=ProfileResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return user


@router.put("", response_model=ProfileResponse)
async def update_profile(
    updates: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    extra = updates.model_extra or {}
    if "user_id" in extra or "userId" in extra or "id" in extra:
        raise ValidationError("User ID cannot be provided in request body", "USER_ID_NOT_ALLOWED")

    changes = {}
    if updates.name is not None:
        changes["name"] = _optional_text(updates.name, "Name", "INVALID_NAME", 128)

    if updates.phone is not None:
        phone = _optional_text(updates.phone, "Phone", "INVALID_PHONE", 32)
        if phone and not PHONE_PATTERN.match(phone):
            raise ValidationError("Phone must be a phone number such as +919812345678", "INVALID_PHONE")
        changes["phone"] = re.sub(r"[ ()\-]", "", phone) if phone else None

    if updates.email is not None:
        email = _optional_text(updates.email, "Email", "INVALID_EMAIL", 256)
        if email and not EMAIL_PATTERN.match(email):
            raise ValidationError("Email address is not valid", "INVALID_EMAIL")
        changes["email"] = email.lower() if email else None

    # Nothing is touched until every field has passed
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info(f"Profile updated for {user.id}")
    return user
