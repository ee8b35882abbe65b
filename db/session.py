
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from core.settings import Settings
from db.models import Base

# Global engine singleton
_engine = None


def reset_engine():
    """Reset the global engine singleton. Used for testing."""
    global _engine
    if _engine:
        _engine.dispose()
        _engine = None


def get_engine(settings: Settings) -> Engine:
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        if settings.DATABASE_URL.startswith("postgresql"):
            _engine = create_engine(
                settings.DATABASE_URL,
                future=True,
                poolclass=QueuePool,
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                pool_recycle=settings.DATABASE_POOL_RECYCLE,
                pool_pre_ping=True,  # Verify connections before use
            )
        elif settings.DATABASE_URL.startswith("sqlite"):
            # One shared connection so in-memory databases survive across threads
            _engine = create_engine(
                settings.DATABASE_URL,
                future=True,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            _engine = create_engine(settings.DATABASE_URL, future=True)
    return _engine


def make_session_factory(engine: Engine) -> sessionmaker:
    # Records are read after commit, once the session is gone
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


def init_db(settings: Settings) -> Engine:
    """Initialize database tables."""
    engine = get_engine(settings)
    Base.metadata.create_all(engine)
    return engine
