from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.dependencies.auth import get_current_user_id
from app.schemas.auth import SettingsUpdate, WatermarkUpdate
from app.services import accounts

router = APIRouter()


@router.get("/profile")
def get_profile(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """Get current user profile"""
    user = accounts.get_user_or_404(db, user_id)

    profile = accounts.public_user(user, with_preferences=True)
    profile["watermarkSettings"] = accounts.watermark_settings(user)
    return {"success": True, "user": profile}


@router.patch("/settings")
def update_settings(
    data: SettingsUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """Update language and/or theme. Omitted fields are left unchanged."""
    accounts.update_settings(db, user_id, language=data.language, theme=data.theme)
    return {"success": True, "message": "Settings updated"}


@router.patch("/watermark")
def update_watermark(
    data: WatermarkUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """Customize the watermark applied to generated images (yearly plan only)."""
    user = accounts.update_watermark(db, user_id, data.model_dump(exclude_none=True))
    return {"success": True, "watermarkSettings": accounts.watermark_settings(user)}
