import os
from dotenv import load_dotenv

load_dotenv()


def _database_uri():
    uri = os.getenv("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    return uri


def _flag(name, default="0"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # None falls back to a SQLite file in the instance folder (see create_app)
    SQLALCHEMY_DATABASE_URI = _database_uri()

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    AUTO_CREATE_TABLES = _flag("AUTO_CREATE_TABLES", "1")

    # Raise instead of logging when group balances don't sum to zero
    STRICT_BALANCE_CHECKS = _flag("STRICT_BALANCE_CHECKS")

    SLUG_MAX_ATTEMPTS = int(os.getenv("SLUG_MAX_ATTEMPTS", "10"))
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

    RECENT_GROUPS_COOKIE = "splitsend_recent"
    RECENT_GROUPS_LIMIT = 10
    RECENT_GROUPS_MAX_AGE = 60 * 60 * 24 * 365


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUTO_CREATE_TABLES = True
    STRICT_BALANCE_CHECKS = True
    LOG_LEVEL = "DEBUG"
