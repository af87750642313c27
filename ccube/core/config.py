# ccube/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    All values have defaults so the API boots against a local SQLite file.

    Optional env vars (.env):
      - DATABASE_URL (SQLite file or Postgres connection string)
      - TAX_RATE (fraction applied after discounts, e.g. 0.14)
      - CART_EXPIRATION_MINUTES (carts older than this are cleared)
      - LOG_LEVEL
    """

    PROJECT_NAME: str = "CCube Storefront API"
    API_V1_STR: str = "/api/v1"

    # Persistence
    DATABASE_URL: str = "sqlite:///./ccube.db"

    # Pricing
    TAX_RATE: float = 0.14

    # Carts are anonymous and keyed by device id; they expire after 2 hours
    CART_EXPIRATION_MINUTES: int = 120

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
