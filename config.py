import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Secrets (signs the session cookie)
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this file as loginguard.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "loginguard.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie
    SESSION_COOKIE_NAME = "loginguard_session"
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", "false")

    # Brute-force protection: failures since last success before blocking.
    # Validated at startup, see PolicyConfig.from_mapping
    USER_LOCK_THRESHOLD = os.getenv("USER_LOCK_THRESHOLD", "3")
    IP_BAN_THRESHOLD = os.getenv("IP_BAN_THRESHOLD", "10")

    # Only enable behind a proxy that overwrites X-Forwarded-For
    TRUST_X_FORWARDED_FOR = _env_bool("TRUST_X_FORWARDED_FOR", "false")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    REQUEST_TIMING = _env_bool("REQUEST_TIMING", "true")

    # Basic app settings
    DEBUG = False
