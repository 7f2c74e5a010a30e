# runtime settings, overridable through environment variables
import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


DB_PATH = os.getenv("VALENCIRE_DB_PATH", "data/valencire.sqlite")

USERS_KEY = "valencire_users"
SESSION_KEY = "valencire_session"

MIN_PASSWORD_LENGTH = _env_int("VALENCIRE_MIN_PASSWORD_LENGTH", 6)
ACTIVITY_DISPLAY_LIMIT = _env_int("VALENCIRE_ACTIVITY_LIMIT", 20)

DEBUG = bool(os.getenv("DEBUG"))
