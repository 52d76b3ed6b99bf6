from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    # App
    app_name: str = "Analytics Hub"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./hub.db"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="HUB_",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
