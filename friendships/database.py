from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import QueuePool
from friendships.config import settings
from friendships.utils.logger import get_logger

logger = get_logger(__name__)

# Global variables for lazy initialization
_engine = None
_session_local = None

Base = declarative_base()

def _engine_options(database_url: str) -> dict:
    """Pool options for the configured backend. SQLite keeps SQLAlchemy's defaults."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }

def get_engine():
    """Get database engine with lazy initialization for worker compatibility."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.DATABASE_URL,
            echo=settings.DEBUG,  # Log SQL queries in debug mode
            **_engine_options(settings.DATABASE_URL),
        )
        logger.info(f"Database engine configured for {_engine.url.get_backend_name()}")
    return _engine

def get_session_local():
    """Get SessionLocal with lazy initialization."""
    global _session_local
    if _session_local is None:
        _session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())
    return _session_local

def init_db():
    """Create the friendships tables if they do not exist yet."""
    # Import models so they register on Base.metadata
    from friendships import models  # noqa: F401
    Base.metadata.create_all(bind=get_engine())
    logger.info("Database initialization check complete")

def get_db():
    """
    Database dependency for FastAPI.
    Provides database session with automatic cleanup.
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.error(f"Error during rollback: {rollback_error}")
        raise
    finally:
        try:
            db.close()
        except Exception as close_error:
            logger.error(f"Error closing database session: {close_error}")
