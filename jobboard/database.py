"""
SQLAlchemy engine and session factory for the account store.

All three account partitions and the email registry share one database,
configured by ``DATABASE_URL``.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings

# SQLite connections are shared with the threadpool that runs sync work
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def get_db():
    """Request-scoped session; services commit, this only closes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
