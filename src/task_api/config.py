"""
Runtime configuration for the Task API service.

Settings come from environment variables, optionally seeded from a local
.env file. Real environment variables always win over the file.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_DATABASE_URL = "sqlite://tasks.db"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "DEBUG"

MEMORY_DATABASE = ":memory:"


class ConfigError(ValueError):
    """Raised when an environment value cannot be turned into a setting."""


@dataclass(frozen=True)
class Settings:
    """Immutable startup configuration shared by the whole process."""
    database_path: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL


def parse_database_url(url: str) -> str:
    """
    Convert a DATABASE_URL value into a SQLite path.

    Accepts ``sqlite://<path>``, ``sqlite:<path>``, ``sqlite::memory:`` and
    bare filesystem paths. Any other scheme is rejected since SQLite is the
    only supported store.

    Raises:
        ConfigError: If the URL is empty or names an unsupported scheme
    """
    url = url.strip()
    if not url:
        raise ConfigError("DATABASE_URL is empty")

    if url.startswith("sqlite://"):
        path = url[len("sqlite://"):]
    elif url.startswith("sqlite:"):
        path = url[len("sqlite:"):]
    elif "://" in url:
        scheme = url.split("://", 1)[0]
        raise ConfigError(f"Unsupported database scheme: {scheme}")
    else:
        path = url

    # sqlx style options (e.g. ?mode=rwc) have no meaning for sqlite3.connect
    path = path.split("?", 1)[0]
    if not path:
        raise ConfigError(f"DATABASE_URL has no database path: {url}")
    return path


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {value!r}")
    if not 0 < port < 65536:
        raise ConfigError(f"PORT out of range: {port}")
    return port


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    When ``environ`` is omitted the process environment is used, after
    loading ``.env`` from the working directory if one exists.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True), override=False)
        environ = os.environ

    database_url = environ.get("DATABASE_URL") or environ.get("DATABASE_PATH") or DEFAULT_DATABASE_URL

    return Settings(
        database_path=parse_database_url(database_url),
        host=environ.get("HOST", DEFAULT_HOST),
        port=_parse_port(environ.get("PORT", str(DEFAULT_PORT))),
        log_level=environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
