"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the lab happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. session_secret -> SESSION_SECRET). Type coercion and validation are
      built in.

Lab notes:
  SESSION_SECRET falls back to a fixed, publicly known value when unset. This
  is the weak default the lab ships with; a warning is logged at startup.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("takeoverlab.config")

FALLBACK_SESSION_SECRET = "fallback-secret-key"

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'takeoverlab.db'}"


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
    # Server
    # ------------------------------------------------------------------

    debug: bool = False
    host: str = "0.0.0.0"  # noqa: S104 -- lab server listens on all interfaces
    port: int = 3000

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    # Empty string means "not configured"; the validator swaps in the fallback.
    session_secret: str = ""
    session_cookie: str = "session"

    # ------------------------------------------------------------------
    # OTP
    # ------------------------------------------------------------------

    otp_ttl_seconds: int = 30
    # How often the background sweep physically deletes expired OTP rows.
    # Reads already ignore expired rows, so this only bounds table growth.
    otp_purge_interval_seconds: float = 5.0

    @model_validator(mode="after")
    def apply_session_secret_fallback(self) -> "Settings":
        """Use the fixed fallback secret when SESSION_SECRET is not set."""
        if not self.session_secret:
            self.session_secret = FALLBACK_SESSION_SECRET
            logger.warning("SESSION_SECRET not set -- using the built-in fallback secret.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
