from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Database (the platform's managed Postgres)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Hosted platform (identity + storage collaborator)
    PLATFORM_URL: str = ""
    SERVICE_ROLE_KEY: str = Field(default="", repr=False)  # elevated, server-side only
    INVITE_REDIRECT_TO: str | None = None
    PLATFORM_TIMEOUT: float = 10.0

    # Application
    APP_NAME: str = "PC Shop Finance API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = ""
    CORS_ALLOW_CREDENTIALS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS from comma-separated string"""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def platform_base_url(self) -> str:
        return self.PLATFORM_URL.rstrip("/")

    @property
    def missing_platform_settings(self) -> list[str]:
        """Names of required platform settings that are not configured"""
        missing = []
        if not self.PLATFORM_URL.strip():
            missing.append("PLATFORM_URL")
        if not self.SERVICE_ROLE_KEY.strip():
            missing.append("SERVICE_ROLE_KEY")
        return missing


# Global settings instance
settings = Settings()
