from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool
from app.core.config import get_settings


def build_engine(url: str) -> Engine:
    """Create the process-wide engine for the given database URL."""
    # Normalize postgres:// -> postgresql:// for SQLAlchemy
    if url.startswith("postgres://"):
        url = "postgresql://" + url[10:]

    if url.startswith("sqlite"):
        # FastAPI runs sync handlers on a threadpool
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=10,  # Number of connections to maintain persistently
        max_overflow=20,  # Maximum number of connections to create beyond pool_size
        pool_timeout=30,  # Seconds to wait before giving up on getting a connection
        pool_pre_ping=True,  # Verify connections before using them (handles stale connections)
        pool_recycle=3600,  # Recycle connections after 1 hour to prevent stale connections
        echo=False
    )


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(db) -> None:
    """Run a trivial query on a Session or Connection; raises if the database is unreachable."""
    db.execute(text("SELECT 1"))
