"""Per-user preferences kept in the users.settings JSON column"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict

from sqlalchemy.orm import sessionmaker

from studydesk.database.models import User
from studydesk.services.notifications import NotificationPermission
from studydesk.utils.constants import DEFAULT_THEME, THEMES
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class Preferences:
    theme: str = DEFAULT_THEME
    notifications_enabled: bool = True
    onboarding_seen: bool = False
    notification_permission: str = NotificationPermission.DEFAULT.value

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "Preferences":
        settings = settings or {}
        theme = settings.get("theme", DEFAULT_THEME)
        permission = settings.get("notification_permission", NotificationPermission.DEFAULT.value)
        if permission not in {p.value for p in NotificationPermission}:
            permission = NotificationPermission.DEFAULT.value
        return cls(
            theme=theme if theme in THEMES else DEFAULT_THEME,
            notifications_enabled=bool(settings.get("notifications_enabled", True)),
            onboarding_seen=bool(settings.get("onboarding_seen", False)),
            notification_permission=permission,
        )


def get_or_create_user(session_factory: sessionmaker) -> int:
    """Get or create the default local user"""
    db = session_factory()
    try:
        user = db.query(User).first()
        if not user:
            user = User(name="Student", email="student@example.com", settings={})
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info("Created default user %s", user.id)
        return user.id
    finally:
        db.close()


def load_preferences(session_factory: sessionmaker, user_id: int) -> Preferences:
    db = session_factory()
    try:
        user = db.get(User, user_id)
        return Preferences.from_settings(user.settings if user else {})
    finally:
        db.close()


def save_preferences(session_factory: sessionmaker, user_id: int, **changes) -> Preferences:
    """Merge changes into the stored preferences and return the result"""
    db = session_factory()
    try:
        user = db.get(User, user_id)
        if user is None:
            raise LookupError(f"No user {user_id}")
        current = Preferences.from_settings(user.settings or {})
        updated = Preferences.from_settings(asdict(replace(current, **changes)))
        # Reassign so SQLAlchemy sees the JSON column change
        user.settings = {**(user.settings or {}), **asdict(updated)}
        db.commit()
        return updated
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
