"""
grocer/database.py
Engine, SessionLocal, Base, and the get_db dependency.
All models inherit from this Base.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from grocer.config import get_settings


def make_engine(url: str, echo: bool = False):
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(pool_size=10, max_overflow=20, pool_timeout=30, pool_recycle=1800)
    return create_engine(url, **kwargs)


_settings = get_settings()
engine = make_engine(_settings.database_url, echo=_settings.db_echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a database session, auto-closes after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create missing tables."""
    # models register themselves on Base.metadata when imported
    from grocer.model import order, product, user  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
