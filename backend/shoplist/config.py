"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "Office Shopping List"
    ENV: str = "development"
    DEBUG: bool = True
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./shoplist.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_ECHO: bool = False

    # JWT (identity boundary; tokens are issued by the auth service)
    JWT_SECRET_KEY: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_LEEWAY_SECONDS: int = 30  # clock skew tolerance for exp validation

    # Ordering policy
    # Used only when the fulfillment settings row is created lazily.
    DEFAULT_MIN_PENDING_ITEMS: int = 5
    NOTIFICATION_PAGE_SIZE: int = 20
    FULFILLMENT_HISTORY_LIMIT: int = 20

    # User provisioning (seed script)
    ORDERER_EMAILS: str = ""
    ALLOWED_EMAIL_DOMAIN: str = "haptiq.com"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def orderer_emails(self) -> list[str]:
        """Get normalized orderer emails as list."""
        return [
            email.strip().lower()
            for email in self.ORDERER_EMAILS.split(",")
            if email.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
