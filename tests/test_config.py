from studydesk.config import DEFAULT_DATABASE_URL, Settings


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.max_retries == 3
    assert settings.retry_base_delay_ms == 1000
    assert settings.notification_poll_seconds == 30


def test_values_read_from_environment():
    settings = Settings.from_env({
        "STUDYDESK_DATABASE_URL": "sqlite:///tmp/test.db",
        "STUDYDESK_TIMEZONE": "Europe/Berlin",
        "STUDYDESK_MAX_RETRIES": "5",
        "STUDYDESK_RETRY_BASE_DELAY_MS": "250",
        "STUDYDESK_NOTIFY_POLL_SECONDS": "10",
    })
    assert settings.database_url == "sqlite:///tmp/test.db"
    assert settings.timezone == "Europe/Berlin"
    assert settings.max_retries == 5
    assert settings.retry_base_delay_ms == 250
    assert settings.notification_poll_seconds == 10


def test_invalid_numbers_fall_back_to_defaults():
    settings = Settings.from_env({
        "STUDYDESK_MAX_RETRIES": "0",
        "STUDYDESK_RETRY_BASE_DELAY_MS": "soon",
        "STUDYDESK_NOTIFY_POLL_SECONDS": "",
    })
    assert settings.max_retries == 3
    assert settings.retry_base_delay_ms == 1000
    assert settings.notification_poll_seconds == 30
