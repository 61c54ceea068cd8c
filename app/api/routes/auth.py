from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.schemas.auth import LoginRequest, RegisterRequest
from app.services import accounts

router = APIRouter()


def _jwt_secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return settings.jwt_secret


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create a FREE account and return a session token."""
    token, user = accounts.register(db, _jwt_secret(settings), data.email, data.password, data.name)
    return {
        "success": True,
        "token": token,
        "user": accounts.public_user(user),
    }


@router.post("/login")
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Log in with email and password.
    An unknown email and a wrong password get the same 401 response.
    """
    token, user = accounts.login(db, _jwt_secret(settings), data.email, data.password)
    return {
        "success": True,
        "token": token,
        "user": accounts.public_user(user, with_preferences=True),
    }
