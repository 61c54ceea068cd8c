"""
AI Interior Designer Backend API
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True  # Override any existing configuration
)

logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).resolve().parent.parent


def alembic_config(db_url: str) -> Config:
    """Alembic config bound to db_url, independent of the working directory."""
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    alembic_cfg.attributes["database_url"] = db_url
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def run_migrations(db_url: str) -> bool:
    """Upgrade the schema to head. Returns False when alembic.ini is absent and nothing ran.
    Fails startup if migrations fail, so the DB is never left out of sync."""
    if not (PROJECT_ROOT / "alembic.ini").exists():
        logger.warning("alembic.ini not found, skipping Alembic migrations")
        return False
    try:
        command.upgrade(alembic_config(db_url), "head")
        logger.info("Alembic migrations completed successfully")
    except Exception as e:
        logger.exception("Alembic migration failed: %s", e)
        raise  # Fail startup so DB is not left out of sync
    return True


from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api.routes import auth, users, generation, stripe as stripe_router, webhooks, health
from app.core.config import get_settings
from app.core.exceptions import AppError, StorageError
from app.core.middleware import (
    RATE_LIMIT_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    BodySizeLimitMiddleware,
    FixedWindowCounter,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from app.db.base import Base
from app.db.session import engine, ping
# Import all models to ensure they're registered with Base
from app.models import User, Generation, Subscription  # noqa: F401

settings = get_settings()

app = FastAPI(title="AI Interior Designer")

rate_limit_counter = FixedWindowCounter(RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW_SECONDS)


@app.on_event("startup")
def startup_event():
    """Connect to the database and bring the schema to the latest Alembic revision.
    A database that cannot be reached aborts startup."""
    try:
        with engine.connect() as conn:
            ping(conn)
        logger.info("✅ Database connected")
    except Exception as e:
        logger.error("❌ Database connection failed: %s", e)
        raise

    if not run_migrations(engine.url.render_as_string(hide_password=False)):
        Base.metadata.create_all(bind=engine)

    logger.info("==============================================")
    logger.info("🚀 AI INTERIOR DESIGNER - server started")
    logger.info("📡 Port: %s", settings.port)
    logger.info("🌍 Environment: %s", settings.environment)
    logger.info("==============================================")


@app.on_event("shutdown")
def shutdown_event():
    logger.info("Shutting down, closing database connections...")
    engine.dispose()


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s: %s", request.url.path, exc)
    error = StorageError("Database error")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Server error on %s: %s", request.url.path, exc, exc_info=exc)
    message = str(exc) if get_settings().is_development else "An error occurred"
    return JSONResponse(status_code=500, content={"error": "Server error", "message": message})


# Outermost middleware is added last
app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(RateLimitMiddleware, counter=rate_limit_counter, prefix="/api/")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(SecurityHeadersMiddleware)

# Register routers
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/user", tags=["Users"])
app.include_router(generation.router, prefix="/api", tags=["Generation"])
app.include_router(stripe_router.router, prefix="/api", tags=["Stripe"])
app.include_router(webhooks.router, prefix="/api", tags=["Webhooks"])


class SPAStaticFiles(StaticFiles):
    """Static files with index.html served for any path that is not a file."""

    async def get_response(self, path: str, scope):
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404:
            return await super().get_response("index.html", scope)
        return response


# Frontend build and SPA fallback; must be mounted after the API routers
app.mount("/", SPAStaticFiles(directory=settings.public_dir, html=True, check_dir=False), name="frontend")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
