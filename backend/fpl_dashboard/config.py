"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # FPL API
    fpl_api_base_url: str = "https://fantasy.premierleague.com/api"
    user_agent: str = "FPL-Dashboard/1.0"
    request_timeout: float = 30.0  # seconds

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Logging
    log_level: str = "INFO"

    # Proxy cache (TTLs come from cache_policies, per endpoint)
    cache_max_entries: int = 512

    # League live standings: picks are fetched per entry on the page
    max_concurrent_picks_requests: int = 10
    max_league_entries: int = 50

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
