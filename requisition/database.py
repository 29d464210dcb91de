# requisition/database.py
"""
Database engine, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite for local runs and tests).
The engine and session factory are built once at startup and kept on
app.state; get_db() hands each request its own session from there.
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str):
    """Build the SQLAlchemy engine for the configured database URL."""
    if database_url.startswith("sqlite"):
        # SQLite connections are shared with FastAPI's worker threads
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


def create_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from requisition.models.user import User                      # noqa
    from requisition.models.vehicle import Vehicle                # noqa
    from requisition.models.vehicle_request import VehicleRequest  # noqa
    from requisition.models.approval import Approval              # noqa

    Base.metadata.create_all(bind=engine)
