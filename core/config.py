"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the account service happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. database_url -> DATABASE_URL). Type coercion and validation are
      built in.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or docstore/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("accountsvc.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'docstore' / 'accountsvc.db'}"


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
    # Core
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    # JSON list in the environment, e.g. ALLOWED_HOSTS='["api.example.com"]'
    allowed_hosts: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Document store
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Sessions and passwords
    # ------------------------------------------------------------------

    session_cookie_name: str = "auth_token"
    secure_cookies: bool = True
    session_token_length: int = 256
    salt_length: int = 32

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_lengths(self) -> "Settings":
        """Reject token and salt lengths too short to be unguessable.

        Session tokens never expire, so a short token is a standing invitation
        to brute force. 64 alphanumeric characters is ~380 bits.
        """
        if self.session_token_length < 64:
            raise ValueError("SESSION_TOKEN_LENGTH must be at least 64 characters.")
        if self.salt_length < 8:
            raise ValueError("SALT_LENGTH must be at least 8 characters.")
        if not self.secure_cookies:
            logger.warning("SECURE_COOKIES is false; session cookies will be sent over plain HTTP.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
