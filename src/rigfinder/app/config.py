"""Application configuration via Pydantic Settings."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Resolve .env from the project root regardless of CWD
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./rigfinder.db"

    # Auth / JWT (tokens are issued by the auth collaborator, we only verify)
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 1440

    # CORS / Frontend
    cors_origins: str = "http://localhost:5173"

    # Contact-event logging
    rate_limit_max_requests: int = 30
    rate_limit_window_seconds: int = 60
    dedupe_window_minutes: int = 30

    # Billing
    default_cpc_rate: Decimal = Decimal("15.00")

    # Search
    default_search_radius_miles: float = 40.0

    # General
    debug: bool = True

    model_config = {"env_file": str(_ENV_FILE), "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list.

        In debug mode, returns ["*"] to allow any origin (LAN IPs, etc.).
        """
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def dedupe_window_seconds(self) -> int:
        return self.dedupe_window_minutes * 60


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
