"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the Mitfahrbörse happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. session_idle_seconds -> SESSION_IDLE_SECONDS).

  @model_validator(mode="after"): Cross-field checks run once every field is
      resolved, so a bad deployment refuses to start instead of failing on the
      first request.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or board/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("mitfahrboerse.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'mitfahrboerse.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    # Small bounded pool. Exhaustion queues callers for db_pool_timeout
    # seconds, after which the wait surfaces as an upstream failure.
    db_pool_size: int = 5
    db_pool_timeout: float = 30.0

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    # One idle limit for the whole table, never per token.
    session_idle_seconds: int = 10 * 60
    session_shards: int = 16
    # 0 disables the background sweep; expiry is then purely lazy.
    session_sweep_seconds: int = 0

    # ------------------------------------------------------------------
    # Deployment variants
    # ------------------------------------------------------------------

    public_entry_list: bool = False
    bind_entry_owner: bool = True

    # ------------------------------------------------------------------
    # HTTP / logging
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject settings that would make the session table or pool unusable."""
        if self.session_idle_seconds <= 0:
            raise ValueError("SESSION_IDLE_SECONDS must be greater than 0.")
        if self.session_shards < 1:
            raise ValueError("SESSION_SHARDS must be at least 1.")
        if self.session_sweep_seconds < 0:
            raise ValueError("SESSION_SWEEP_SECONDS must be 0 (disabled) or positive.")
        if self.db_pool_size < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1.")
        if self.db_pool_timeout <= 0:
            raise ValueError("DB_POOL_TIMEOUT must be greater than 0.")
        if self.public_entry_list:
            logger.warning("PUBLIC_ENTRY_LIST is enabled -- GET /entries is served without authentication")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
