"""
Generation pipeline: quota reservation -> Hugging Face -> ImgBB -> persistence.

The FREE quota is enforced with a single conditional UPDATE so that two
concurrent requests cannot both pass the check. If a later step fails, the
reservation is released before the error propagates.
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.config import Settings
from app.core.exceptions import QuotaExceededError, StorageError, ValidationError
from app.core.plan_limits import (
    FREE_GENERATION_LIMIT,
    WATERMARK_TEXT,
    get_plan_limit,
    is_metered,
    usage_summary,
)
from app.models.generation import Generation
from app.models.user import Plan, User
from app.services.accounts import get_user_or_404
from app.services.image_generation import build_prompt, generate_image
from app.services.image_hosting import upload_image

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20


def reserve_generation(db: Session, user_id: int) -> bool:
    """Atomically take one FREE generation. Returns False if none is left."""
    updated = (
        db.query(User)
        .filter(
            User.id == user_id,
            User.plan_tier == Plan.FREE.value,
            User.generations_used < FREE_GENERATION_LIMIT,
        )
        .update({User.generations_used: User.generations_used + 1}, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def release_generation(db: Session, user_id: int) -> None:
    """Give back a reservation taken by reserve_generation."""
    db.query(User).filter(
        User.id == user_id,
        User.generations_used > 0,
    ).update({User.generations_used: User.generations_used - 1}, synchronize_session=False)
    db.commit()


def generate(
    db: Session,
    settings: Settings,
    user_id: int,
    prompt: Optional[str],
    style: Optional[str],
    room_type: Optional[str],
) -> dict:
    if not prompt or not style:
        raise ValidationError("Prompt and style are required")

    user = get_user_or_404(db, user_id)

    reserved = False
    if is_metered(user.plan_tier):
        reserved = reserve_generation(db, user.id)
        db.refresh(user)
        # A plan change may have landed between the read and the update
        if not reserved and is_metered(user.plan_tier):
            logger.info("Generation quota reached for user %s", user.id)
            raise QuotaExceededError(usage_summary(user.plan_tier, user.generations_used))

    plan_tier = user.plan_tier
    watermark_required = bool(get_plan_limit(plan_tier, "watermark_required"))

    try:
        image_bytes = generate_image(build_prompt(prompt, style, room_type), settings.huggingface_api_key)
        image_url = upload_image(image_bytes, settings.imgbb_api_key)

        generation = Generation(
            user_id=user.id,
            prompt=prompt,
            style=style,
            room_type=room_type,
            image_url=image_url,
            has_watermark=watermark_required,
        )
        db.add(generation)
        try:
            db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to save generation for user %s: %s", user.id, e)
            raise StorageError("Error during generation")
    except Exception:
        db.rollback()
        if reserved:
            release_generation(db, user.id)
            logger.info("Released generation reservation for user %s", user.id)
        raise

    db.refresh(user)

    return {
        "success": True,
        "image": image_url,
        "watermark": {
            "required": watermark_required,
            "text": WATERMARK_TEXT if watermark_required else None,
            "customizable": bool(get_plan_limit(plan_tier, "watermark_customizable")),
        },
        "usage": usage_summary(plan_tier, user.generations_used),
    }


def generation_view(generation: Generation) -> dict:
    return {
        "id": generation.id,
        "userId": generation.user_id,
        "prompt": generation.prompt,
        "style": generation.style,
        "roomType": generation.room_type,
        "imageUrl": generation.image_url,
        "hasWatermark": generation.has_watermark,
        "createdAt": generation.created_at.isoformat() if generation.created_at else None,
    }


def list_generations(db: Session, user_id: int) -> List[Generation]:
    """The user's most recent generations, newest first."""
    return (
        db.query(Generation)
        .filter(Generation.user_id == user_id)
        .order_by(Generation.created_at.desc(), Generation.id.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )
