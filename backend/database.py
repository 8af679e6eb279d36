# database.py
"""
SQLAlchemy engine and sessions for the listings store (properties, favorites
and view tracking tables).
"""
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from config import settings

# SQLite needs this flag because FastAPI serves requests from a thread pool.
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declarative base for the tables in models.py
Base = declarative_base()


def init_db(bind=None):
    """Creates any missing listings tables."""
    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def session_scope(session_factory=SessionLocal):
    """Session for code outside a request: app startup and the batch CLI."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_db():
    """
    FastAPI dependency yielding one session per request.
    """
    with session_scope() as db:
        yield db
