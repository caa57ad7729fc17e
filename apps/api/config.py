"""
Application configuration using Pydantic Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (memory-resident unless pointed at a file or server)
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    AUTO_CREATE_DB_SCHEMA: bool = True

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # First-boot admin account (seeding is skipped while the password is empty)
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@igboost.local"
    ADMIN_PASSWORD: str = ""

    # Instagram web endpoints
    INSTAGRAM_BASE_URL: str = "https://www.instagram.com"
    INSTAGRAM_APP_ID: str = "936619743392459"
    INSTAGRAM_USER_AGENT: str = "Mozilla/5.0"
    INSTAGRAM_LOGIN_USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"
    INSTAGRAM_HTTP_TIMEOUT_SECONDS: float = 15.0
    AUTOMATION_ACTION_TIMEOUT_SECONDS: float = 30.0

    # Security
    JWT_SECRET: str = "change_me_in_production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 168
    ENCRYPTION_KEY: str = "change_me_32_byte_key_for_prod"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


def validate_security_settings() -> None:
    """Fail fast when insecure default secrets are still configured."""
    insecure_values = {
        "",
        "change_me_in_production",
        "change_me_32_byte_key_for_prod",
        "igboost-secret-key",
    }
    jwt_secret = (settings.JWT_SECRET or "").strip()
    encryption_key = (settings.ENCRYPTION_KEY or "").strip()

    if jwt_secret in insecure_values or len(jwt_secret) < 24:
        raise ValueError("JWT_SECRET is insecure. Configure a strong non-default secret (>=24 chars).")
    if encryption_key in insecure_values or len(encryption_key) < 32:
        raise ValueError("ENCRYPTION_KEY is insecure. Configure a strong non-default key (>=32 chars).")
