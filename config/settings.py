"""
Configuration settings for the TeamCollab attendance backend.
All sensitive values are loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "TeamCollab Backend"
    debug: bool = Field(default=False, env="DEBUG")
    environment: str = Field(default="production", env="ENVIRONMENT")

    # Server
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=8000, env="PORT")
    allowed_origins: List[str] = Field(
        default=["http://localhost:3000"], env="ALLOWED_ORIGINS"
    )

    # Database (PostgreSQL)
    database_url: str = Field(default="", env="DATABASE_URL")
    database_echo: bool = Field(default=False, env="DATABASE_ECHO")
    db_pool_size: int = Field(default=10, env="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, env="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=30, env="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(default=3600, env="DB_POOL_RECYCLE")

    # Redis (rate limiting storage, optional)
    redis_url: str = Field(default="", env="REDIS_URL")

    # Calendar
    # Business days and HH:MM renderings are derived in this timezone only.
    timezone: str = Field(default="Asia/Seoul", env="TIMEZONE")
    locale: str = Field(default="en", env="LOCALE")  # en | ko

    # Auth
    jwt_secret: str = Field(default="teamcollab-change-me", env="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", env="JWT_ALGORITHM")
    access_token_cookie: str = Field(default="accessToken", env="ACCESS_TOKEN_COOKIE")
    access_token_expire_days: int = Field(default=7, env="ACCESS_TOKEN_EXPIRE_DAYS")

    # Slack
    slack_command: str = Field(default="/teamcollab", env="SLACK_COMMAND")
    slack_webhook_url: str = Field(default="", env="SLACK_WEBHOOK_URL")
    slack_rate_limit: str = Field(default="120/minute", env="SLACK_RATE_LIMIT")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the application settings."""
    return settings
