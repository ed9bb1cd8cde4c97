"""Application settings and validation."""

import os
from pathlib import Path
from typing import Mapping, Optional

from sqlalchemy.engine import URL, make_url


def default_sqlite_url() -> str:
    """Local development database, created in the current working directory."""
    return f"sqlite:///{Path.cwd() / 'app.db'}"


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    # empty strings come from compose defaults that expand to nothing
    raw = env.get(name, "").strip()
    return int(raw) if raw else default


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    return float(raw) if raw else default


class Settings:
    ENV: str
    DB_URL: Optional[str]
    DB_HOST: Optional[str]
    DB_PORT: int
    DB_NAME: Optional[str]
    DB_USERNAME: Optional[str]
    DB_PASSWORD: Optional[str]
    SQL_ECHO: bool
    SCHEMA_AUTO_CREATE: bool
    DB_POOL_SIZE: int
    DB_MAX_OVERFLOW: int
    DB_POOL_TIMEOUT: int
    DB_POOL_RECYCLE: int
    DB_CONNECT_TIMEOUT: int
    DB_READ_TIMEOUT: int
    DB_CONNECT_RETRIES: int
    DB_CONNECT_BACKOFF_SECONDS: float
    ALLOW_DEV_CORS: bool
    CORS_ORIGINS: list
    LOG_LEVEL: str

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        env = os.environ if environ is None else environ
        self.ENV = env.get("ENV", "dev").lower()
        self.DB_URL = env.get("DB_URL") or None
        self.DB_HOST = env.get("DB_HOST") or None
        self.DB_PORT = _int(env, "DB_PORT", 3306)
        self.DB_NAME = env.get("DB_NAME") or None
        self.DB_USERNAME = env.get("DB_USERNAME") or None
        self.DB_PASSWORD = env.get("DB_PASSWORD") or None
        self.SQL_ECHO = _flag(env.get("SQL_ECHO", "false"))
        self.SCHEMA_AUTO_CREATE = _flag(env.get("SCHEMA_AUTO_CREATE", "true"))
        self.DB_POOL_SIZE = _int(env, "DB_POOL_SIZE", 5)
        self.DB_MAX_OVERFLOW = _int(env, "DB_MAX_OVERFLOW", 10)
        self.DB_POOL_TIMEOUT = _int(env, "DB_POOL_TIMEOUT", 30)
        self.DB_POOL_RECYCLE = _int(env, "DB_POOL_RECYCLE", 1800)
        self.DB_CONNECT_TIMEOUT = _int(env, "DB_CONNECT_TIMEOUT", 10)
        self.DB_READ_TIMEOUT = _int(env, "DB_READ_TIMEOUT", 30)
        self.DB_CONNECT_RETRIES = max(1, _int(env, "DB_CONNECT_RETRIES", 5))
        self.DB_CONNECT_BACKOFF_SECONDS = max(0.0, _float(env, "DB_CONNECT_BACKOFF_SECONDS", 1.0))
        self.ALLOW_DEV_CORS = _flag(env.get("ALLOW_DEV_CORS", "true"))
        raw_origins = env.get("CORS_ORIGINS", "http://localhost,http://localhost:80,http://localhost:3000")
        self.CORS_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
        self.LOG_LEVEL = env.get("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.DB_URL and not self.DB_HOST:
            raise RuntimeError("DB_URL or DB_HOST must be set in non-dev environments")

    @property
    def database_url(self) -> URL:
        """Resolve the SQLAlchemy URL for the configured database.

        Precedence is `DB_URL`, then a MySQL URL composed from `DB_HOST`
        and friends, then the local SQLite file. JDBC style MySQL URLs
        (as used by the compose file's `DB_URL`) are accepted and mapped
        onto the PyMySQL driver. `DB_USERNAME`/`DB_PASSWORD` fill in
        credentials the URL itself does not carry.
        """
        if self.DB_URL:
            raw = self.DB_URL
            jdbc = raw.startswith("jdbc:")
            if jdbc:
                raw = raw[len("jdbc:"):]
            if raw.startswith("mysql://"):
                raw = "mysql+pymysql://" + raw[len("mysql://"):]
            url = make_url(raw)
            if jdbc:
                # JDBC driver options (useSSL=...) are not PyMySQL arguments
                url = url.set(query={})
            if url.username is None and self.DB_USERNAME:
                url = url.set(username=self.DB_USERNAME)
            if url.password is None and self.DB_PASSWORD:
                url = url.set(password=self.DB_PASSWORD)
            return url
        if self.DB_HOST:
            return URL.create(
                "mysql+pymysql",
                username=self.DB_USERNAME,
                password=self.DB_PASSWORD,
                host=self.DB_HOST,
                port=self.DB_PORT,
                database=self.DB_NAME,
            )
        return make_url(default_sqlite_url())


settings = Settings()
