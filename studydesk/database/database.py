"""Database initialization and session management"""

import os
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studydesk.config import DATA_DIR, Settings
from studydesk.database.models import Base

DATABASE_URL = Settings.from_env().database_url


def make_engine(database_url: str = DATABASE_URL) -> Engine:
    """Create an engine; SQLite URLs share one connection across Streamlit threads"""
    if database_url.startswith("sqlite"):
        if database_url.startswith(f"sqlite:///{DATA_DIR}"):
            os.makedirs(DATA_DIR, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},  # Needed for SQLite
            poolclass=StaticPool,
            echo=False  # Set to True for SQL query logging
        )
    return create_engine(database_url, pool_pre_ping=True, echo=False)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine(DATABASE_URL)

# Session factory
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine = engine):
    """Initialize database - create all tables"""
    Base.metadata.create_all(bind=bind)
