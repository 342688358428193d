"""
Application configuration

Settings are read once at startup and passed explicitly to create_app().
Nothing here is mutated after construction.

Secrets (DATABASE_URL, API_TOKEN, TMDB_API_KEY) may also come from files,
Docker Swarm style:
    1. the plain environment variable, if set
    2. the file named by <NAME>_FILE
    3. /run/secrets/movieclub_<name>, if that file exists
"""
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

SECRETS_DIR = "/run/secrets"
DEFAULT_PERSONS = "D:Dana,J:Jordan,C:Casey,A:Alex"


class ConfigError(ValueError):
    """Configuration is missing or unreadable."""


def _read_secret(path: str, name: str) -> str:
    """Read a secret file. A missing file yields "", an empty one is an error."""
    try:
        contents = Path(path).read_text()
    except FileNotFoundError:
        return ""
    except OSError as e:
        raise ConfigError(f"reading {name} ({path}): {e}") from e

    value = contents.strip()
    if not value:
        raise ConfigError(f"{name} ({path}) is empty")
    return value


def _get_env(env: Dict[str, str], key: str, default: str) -> str:
    """<KEY>_FILE first, then <KEY>, then the default."""
    if file_path := env.get(f"{key}_FILE"):
        try:
            return Path(file_path).read_text().strip()
        except OSError as e:
            raise ConfigError(f"failed to read {key}_FILE ({file_path}): {e}") from e
    return env.get(key) or default


def _get_secret(env: Dict[str, str], key: str, secrets_dir: str) -> str:
    if value := env.get(key):
        return value

    file_key = f"{key}_FILE"
    if path := env.get(file_key):
        if not Path(path).exists():
            raise ConfigError(f"failed to read {file_key} ({path}): file not found")
        return _read_secret(path, file_key)

    return _read_secret(os.path.join(secrets_dir, f"movieclub_{key.lower()}"), key)


def parse_roster(raw: str) -> List[Tuple[str, str]]:
    """
    Parse a person roster like "D:Dana,J:Jordan" into [("D", "Dana"), ...].

    Codes must be unique and non-empty.
    """
    roster: List[Tuple[str, str]] = []
    seen = set()
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        code, sep, name = item.partition(":")
        code, name = code.strip(), name.strip()
        if not sep or not code or not name:
            raise ConfigError(f"invalid roster item {item!r}, expected CODE:Name")
        if code in seen:
            raise ConfigError(f"duplicate roster code {code!r}")
        seen.add(code)
        roster.append((code, name))
    return roster


class Settings(BaseModel):
    """Immutable runtime configuration."""
    model_config = ConfigDict(frozen=True)

    port: int = 4600
    database_url: str
    api_token: str
    tmdb_api_key: str
    log_level: str = "info"
    secure_cookies: bool = True

    # Connection pool (ignored for SQLite)
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False
    db_statement_timeout_ms: int = 15000  # PostgreSQL statement_timeout

    tmdb_timeout: float = 10.0
    persons: Tuple[Tuple[str, str], ...] = Field(
        default_factory=lambda: tuple(parse_roster(DEFAULT_PERSONS))
    )

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None,
                 secrets_dir: str = SECRETS_DIR) -> "Settings":
        """
        Build settings from the process environment (after loading .env).

        Raises:
            ConfigError: required value missing or a secret file unreadable
        """
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        database_url = _get_secret(env, "DATABASE_URL", secrets_dir)
        api_token = _get_secret(env, "API_TOKEN", secrets_dir)
        tmdb_api_key = _get_secret(env, "TMDB_API_KEY", secrets_dir)

        if not database_url:
            raise ConfigError("DATABASE_URL is required")
        if not api_token:
            raise ConfigError("API_TOKEN is required")
        if not tmdb_api_key:
            raise ConfigError("TMDB_API_KEY is required")

        try:
            return cls(
                port=int(_get_env(env, "PORT", "4600")),
                database_url=database_url,
                api_token=api_token,
                tmdb_api_key=tmdb_api_key,
                log_level=_get_env(env, "LOG_LEVEL", "info").lower(),
                secure_cookies=_get_env(env, "SECURE_COOKIES", "true").lower() != "false",
                db_pool_size=int(_get_env(env, "DB_POOL_SIZE", "5")),
                db_max_overflow=int(_get_env(env, "DB_MAX_OVERFLOW", "10")),
                db_pool_timeout=int(_get_env(env, "DB_POOL_TIMEOUT", "30")),
                db_pool_recycle=int(_get_env(env, "DB_POOL_RECYCLE", "3600")),
                db_echo=_get_env(env, "DB_ECHO", "false").lower() == "true",
                db_statement_timeout_ms=int(_get_env(env, "DB_STATEMENT_TIMEOUT_MS", "15000")),
                tmdb_timeout=float(_get_env(env, "TMDB_TIMEOUT", "10")),
                persons=tuple(parse_roster(_get_env(env, "PERSONS", DEFAULT_PERSONS))),
            )
        except ValueError as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"invalid configuration value: {e}") from e
