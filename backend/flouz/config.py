# backend/flouz/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/flouz.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///flouz.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "database" (Flask-SQLAlchemy) or "memory" (process-local, lost on restart)
    STORAGE_BACKEND = os.environ.get("FLOUZ_STORAGE_BACKEND", "database")

    # Run the idempotent bootstrap (master + demo data) when the app starts
    SEED_ON_STARTUP = _env_bool("FLOUZ_SEED_ON_STARTUP", False)

    SESSION_TTL_DAYS = int(os.environ.get("FLOUZ_SESSION_TTL_DAYS", "7"))
    BCRYPT_ROUNDS = int(os.environ.get("FLOUZ_BCRYPT_ROUNDS", "12"))

    # New products get stock=0 (tracked) unless this is off, then stock=None
    TRACK_STOCK_BY_DEFAULT = _env_bool("FLOUZ_TRACK_STOCK_BY_DEFAULT", True)

    MASTER_EMAIL = os.environ.get("FLOUZ_MASTER_EMAIL", "master@flouz.com")
    MASTER_PASSWORD = os.environ.get("FLOUZ_MASTER_PASSWORD", "Master123!")
    DEMO_EMAIL = os.environ.get("FLOUZ_DEMO_EMAIL", "demo@flouz.com")
    DEMO_PASSWORD = os.environ.get("FLOUZ_DEMO_PASSWORD", "Demo1234!")

    TELEGRAM_API_BASE = os.environ.get("TELEGRAM_API_BASE", "https://api.telegram.org")
    NOTIFICATION_TIMEOUT_SECONDS = float(os.environ.get("FLOUZ_NOTIFICATION_TIMEOUT", "10"))
    CURRENCY_SYMBOL = os.environ.get("FLOUZ_CURRENCY_SYMBOL", "€")

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4173",
        "http://127.0.0.1:4173",
    }

    LOG_LEVEL = os.environ.get("FLOUZ_LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BCRYPT_ROUNDS = 4
    SEED_ON_STARTUP = False
    LOG_LEVEL = "WARNING"
