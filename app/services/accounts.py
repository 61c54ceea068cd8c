"""
Account lifecycle: registration, login, profile and preference updates.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    PlanRestrictedError,
    ValidationError,
)
from app.core.plan_limits import get_plan_limit
from app.models.user import Plan, User
from app.utils.auth import (
    MIN_PASSWORD_LENGTH,
    create_session_token,
    hash_password,
    normalize_email,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Incorrect email or password"
WATERMARK_TYPES = ("logo", "text")


def public_user(user: User, with_preferences: bool = False) -> dict:
    data = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "plan": user.plan_tier,
        "generationsUsed": user.generations_used,
        "generationsLimit": get_plan_limit(user.plan_tier, "max_generations"),
    }
    if with_preferences:
        data["language"] = user.language
        data["theme"] = user.theme
    return data


def watermark_settings(user: User) -> dict:
    return {
        "enabled": user.watermark_enabled,
        "type": user.watermark_type,
        "logoUrl": user.watermark_logo_url,
        "text": user.watermark_text,
        "language": user.watermark_language,
        "position": user.watermark_position,
        "opacity": user.watermark_opacity,
    }


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def register(
    db: Session,
    secret: str,
    email: Optional[str],
    password: Optional[str],
    name: Optional[str],
) -> Tuple[str, User]:
    """Create a FREE account and return (token, user)."""
    if not email or not password or not name:
        raise ValidationError("All fields are required")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must contain at least {MIN_PASSWORD_LENGTH} characters")

    normalized_email = normalize_email(email)
    existing_user = db.query(User).filter(User.email == normalized_email).first()
    if existing_user:
        raise ConflictError("This email is already in use")

    user = User(
        email=normalized_email,
        hashed_password=hash_password(password),
        name=name.strip(),
        plan_tier=Plan.FREE.value,
        generations_used=0,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email
        db.rollback()
        raise ConflictError("This email is already in use")
    db.refresh(user)

    logger.info("✅ Registered user %s", user.id)
    return create_session_token(user, secret), user


def login(db: Session, secret: str, email: Optional[str], password: Optional[str]) -> Tuple[str, User]:
    """Authenticate and return (token, user). Unknown email and wrong password are indistinguishable."""
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not verify_password(password, user.hashed_password):
        raise AuthError(INVALID_CREDENTIALS_MESSAGE)

    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)

    return create_session_token(user, secret), user


def update_settings(db: Session, user_id: int, language: Optional[str] = None, theme: Optional[str] = None) -> User:
    user = get_user_or_404(db, user_id)

    if language:
        user.language = language
    if theme:
        user.theme = theme

    db.commit()
    db.refresh(user)
    return user


def update_watermark(db: Session, user_id: int, changes: dict) -> User:
    """
    Apply a partial update to the user's watermark preferences.
    Only plans with watermark_customizable may do this.
    """
    user = get_user_or_404(db, user_id)

    if not get_plan_limit(user.plan_tier, "watermark_customizable"):
        raise PlanRestrictedError("Watermark customization requires the yearly premium plan")

    kind = changes.get("type")
    if kind is not None and kind not in WATERMARK_TYPES:
        raise ValidationError("Watermark type must be 'logo' or 'text'")

    opacity = changes.get("opacity")
    if opacity is not None and not 0 <= opacity <= 100:
        raise ValidationError("Watermark opacity must be between 0 and 100")

    columns = {
        "enabled": "watermark_enabled",
        "type": "watermark_type",
        "logo_url": "watermark_logo_url",
        "text": "watermark_text",
        "language": "watermark_language",
        "position": "watermark_position",
        "opacity": "watermark_opacity",
    }
    for field, column in columns.items():
        value = changes.get(field)
        if value is not None:
            setattr(user, column, value)

    db.commit()
    db.refresh(user)
    return user
