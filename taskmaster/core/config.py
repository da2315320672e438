"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AUTH_PASSWORD = "password"
DEFAULT_SECRET_KEY = "CHANGE_ME_IN_PRODUCTION"


class Settings(BaseSettings):
    """Taskmaster server configuration."""

    model_config = SettingsConfigDict(env_prefix="TM_", env_file=".env", extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./taskmaster.db"
    auto_create_tables: bool = True

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "text"] = "text"

    # Auth (single user, credentials from the environment)
    auth_enabled: bool = True
    auth_username: str = "admin"
    auth_password: str = DEFAULT_AUTH_PASSWORD
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24

    # Assistant
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    assistant_max_iterations: int = 8

    # Display
    display_timezone: str = "Asia/Kolkata"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    def insecure_defaults(self) -> list[str]:
        """Names of auth settings still at their shipped defaults (empty when auth is off)."""
        if not self.auth_enabled:
            return []
        insecure = []
        if self.auth_password == DEFAULT_AUTH_PASSWORD:
            insecure.append("auth_password")
        if self.secret_key == DEFAULT_SECRET_KEY:
            insecure.append("secret_key")
        return insecure


@lru_cache
def get_settings() -> Settings:
    return Settings()
