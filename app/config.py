"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with validation.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path


class Settings(BaseSettings):
    """Application settings with environment variable validation."""

    # Application
    APP_NAME: str = "Equo Compenso"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"  # development, staging, production

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # MongoDB
    MONGODB_ATLAS_URI: Optional[str] = None
    DB_NAME: str = "equo_compenso_db"
    MONGODB_MAX_POOL_SIZE: int = 20
    MONGODB_MIN_POOL_SIZE: int = 1
    MONGODB_TIMEOUT_MS: int = 5000

    # CORS
    ALLOWED_ORIGINS: str = "*"  # Comma-separated list or "*"
    ALLOW_CREDENTIALS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text
    LOG_FILE: Optional[Path] = None

    # Utente di default quando manca l'header X-User-Id
    DEFAULT_USER_ID: str = "admin"

    # Documenti generati
    STORAGE_DIR: Path = Path("storage/docs")

    # Intestazione PDF
    LOGO_PATH: Optional[Path] = Path("assets/logo.png")
    BRAND_NAME: str = "equo compenso"
    BRAND_PHONE: str = "+39 0942 550660"
    BRAND_EMAIL: str = "info@equocompenso.eu"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    def validate_required_secrets(self) -> dict[str, bool]:
        """
        Feature availability from configuration.

        Returns:
            dict: Feature availability status
        """
        return {
            'database': bool(self.MONGODB_ATLAS_URI and self.DB_NAME),
            'logo': bool(self.LOGO_PATH and Path(self.LOGO_PATH).is_file()),
        }


# Create singleton instance
settings = Settings()

# Feature availability (does not raise on missing secrets)
FEATURES = settings.validate_required_secrets()
