import os
from dataclasses import dataclass
from functools import lru_cache


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./data/backlinks.db"
    pool_size: int = 10
    pool_timeout: int = 10
    pool_recycle: int = 30
    # Per-statement limit on PostgreSQL; on SQLite it is the lock wait (busy) timeout.
    statement_timeout: int = 60
    log_level: str = "INFO"
    base_path: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            pool_size=_int_env("DB_POOL_SIZE", cls.pool_size),
            pool_timeout=_int_env("DB_POOL_TIMEOUT", cls.pool_timeout),
            pool_recycle=_int_env("DB_POOL_RECYCLE", cls.pool_recycle),
            statement_timeout=_int_env("DB_STATEMENT_TIMEOUT", cls.statement_timeout),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            base_path=os.getenv("BASE_PATH", "").rstrip("/"),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
