import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.config import Settings, get_settings
from app.db.session import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        ping(db)
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning("Health check: database unreachable: %s", e)
        database = "disconnected"

    # Clients read "mongodb"; "database" carries the same value
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "mongodb": database,
        "database": database,
    }


@router.get("/test")
def test(settings: Settings = Depends(get_settings)):
    return {
        "message": "AI Interior Designer API is running!",
        "env": settings.environment,
    }
