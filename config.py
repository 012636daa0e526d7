import os
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


def _normalise_prefix(raw_prefix: str) -> str:
    raw_prefix = raw_prefix.strip()
    if not raw_prefix or raw_prefix == "/":
        return ""
    if not raw_prefix.startswith("/"):
        raw_prefix = f"/{raw_prefix}"
    return raw_prefix.rstrip("/")


def _parse_weekdays(raw: str) -> tuple[int, ...]:
    days: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        value = int(token)
        if not 0 <= value <= 6:
            raise ValueError(f"Jour ouvrable invalide : {token}")
        if value not in days:
            days.append(value)
    return tuple(sorted(days))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")

    URL_PREFIX = _normalise_prefix(os.environ.get("FLASK_URL_PREFIX", "/planif"))

    _db_user = os.environ.get("DATABASE_USER", "planif")
    _db_password = os.environ.get("DATABASE_PASSWORD", "planif")
    _db_host = os.environ.get("DATABASE_HOST", "localhost")
    _db_port = os.environ.get("DATABASE_PORT", "3306")
    _db_name = os.environ.get("DATABASE_NAME", "planif")

    _default_uri = (
        f"mysql+pymysql://{_db_user}:{_db_password}@{_db_host}:{_db_port}/{_db_name}"
    )

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", _default_uri)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = os.environ.get("DB_ECHO", "false").lower() == "true"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Monday = 0
    WORKING_WEEKDAYS = _parse_weekdays(os.environ.get("WORKING_WEEKDAYS", "0,1,2,3,4"))
    DEFAULT_SESSION_MINUTES = int(os.environ.get("DEFAULT_SESSION_MINUTES", "120"))
    MAX_SESSION_MINUTES = int(os.environ.get("MAX_SESSION_MINUTES", "240"))
    SUGGESTION_WINDOW_DAYS = int(os.environ.get("SUGGESTION_WINDOW_DAYS", "30"))
    PLANNING_WINDOW_DAYS = int(os.environ.get("PLANNING_WINDOW_DAYS", "90"))
    SUGGESTION_LIMIT = int(os.environ.get("SUGGESTION_LIMIT", "10"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    URL_PREFIX = ""
    WORKING_WEEKDAYS = (0, 1, 2, 3, 4)
