from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.dependencies.auth import get_current_user_id
from app.schemas.generation import GenerateRequest
from app.services import generation as generation_service

router = APIRouter()


@router.post("/generate")
def generate(
    data: GenerateRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user_id: int = Depends(get_current_user_id)
):
    """
    Generate an interior-design image.
    FREE accounts are limited to 3 generations; 403 with upgrade=true once used up,
    503 with retryAfter while the model is loading.
    """
    return generation_service.generate(
        db,
        settings,
        user_id,
        prompt=data.prompt,
        style=data.style,
        room_type=data.room_type,
    )


@router.get("/generations")
def list_generations(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """The 20 most recent generations of the current user, newest first."""
    generations = generation_service.list_generations(db, user_id)
    return {
        "success": True,
        "generations": [generation_service.generation_view(g) for g in generations],
    }
