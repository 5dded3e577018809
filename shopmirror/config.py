"""
Configuration management for Shopmirror
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Shopmirror"
    environment: str = "development"
    log_level: str = "INFO"
    log_dir: Optional[str] = None  # None = console only
    log_retention: str = "30 days"  # daily INFO files
    error_log_retention: str = "90 days"

    # API
    host: str = "0.0.0.0"
    port: int = 5000

    # Store (SQLAlchemy URL, MONGO_URI accepted for older deployments)
    database_url: str = Field(validation_alias=AliasChoices("database_url", "mongo_uri"))
    db_connect_timeout: float = 5.0  # seconds
    db_socket_timeout: int = 45  # seconds an idle connection is kept

    # Shopify
    shopify_store: str
    shopify_access_token: str
    shopify_api_version: str = "2023-01"
    shopify_timeout: float = 30.0
    # inventory_levels.json needs a location filter on most stores (comma-separated)
    shopify_inventory_location_ids: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def load_settings() -> Settings:
    """
    Load settings, turning missing or invalid values into a ConfigurationError

    Used by the entry points, which exit before serving when this fails.
    """
    from pydantic import ValidationError
    from shopmirror.errors import ConfigurationError

    try:
        return get_settings()
    except ValidationError as e:
        names = ", ".join(
            str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")
        )
        raise ConfigurationError(f"Required environment variables are missing or invalid: {names}") from e
