"""SQLAlchemy database models for StudyDesk"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, BigInteger, ForeignKey, JSON
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """User profile and settings"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100))
    email = Column(String(255), unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    settings = Column(JSON, default=dict)  # theme, notifications, onboarding

    # Relationships
    entries = relationship("Entry", back_populates="user")
    todos = relationship("Todo", back_populates="user")
    focus_history = relationship("FocusHistory", back_populates="user")


class Entry(Base):
    """Weekly recurring class entry"""
    __tablename__ = "entries"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    days = Column(JSON, nullable=False)  # ["Monday", "Wednesday"]
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    subject = Column(String(255), nullable=False)
    location = Column(String(255))
    color = Column(String(20))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="entries")


class Todo(Base):
    """To-do list item"""
    __tablename__ = "todos"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    text = Column(String(500), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(BigInteger, nullable=False)  # epoch ms

    # Relationships
    user = relationship("User", back_populates="todos")


class FocusHistory(Base):
    """Completed focus session"""
    __tablename__ = "focus_history"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(BigInteger, nullable=False)  # epoch ms
    duration = Column(Integer, nullable=False)  # minutes
    completed = Column(Boolean, default=True, nullable=False)

    # Relationships
    user = relationship("User", back_populates="focus_history")
