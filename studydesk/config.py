"""Environment-driven application settings"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from studydesk.utils.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    NOTIFICATION_POLL_SECONDS,
)
from studydesk.utils.helpers import DEFAULT_TZ

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")
DEFAULT_DATABASE_URL = f"sqlite:///{os.path.join(DATA_DIR, 'studydesk.db')}"


def _int_env(env: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    timezone: str = DEFAULT_TZ
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    notification_poll_seconds: int = NOTIFICATION_POLL_SECONDS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            database_url=env.get("STUDYDESK_DATABASE_URL") or DEFAULT_DATABASE_URL,
            timezone=env.get("STUDYDESK_TIMEZONE") or DEFAULT_TZ,
            max_retries=_int_env(env, "STUDYDESK_MAX_RETRIES", DEFAULT_MAX_RETRIES, minimum=1),
            retry_base_delay_ms=_int_env(env, "STUDYDESK_RETRY_BASE_DELAY_MS", DEFAULT_BASE_DELAY_MS),
            notification_poll_seconds=_int_env(
                env, "STUDYDESK_NOTIFY_POLL_SECONDS", NOTIFICATION_POLL_SECONDS, minimum=1
            ),
        )
