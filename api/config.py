"""
Configuration settings for the Helldivers Leaderboard API.
Uses pydantic-settings for type-safe environment variable management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

DEFAULT_LIFETIME_MONTH_COLLECTIONS = [
    "User_Stats_2025_04",
    "User_Stats_2025_05",
    "User_Stats_2025_06",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Runtime
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "GPTHellbot"
    MONGODB_MAX_POOL_SIZE: int = 10
    MONGODB_MIN_POOL_SIZE: int = 1
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 4000
    MONGODB_SOCKET_TIMEOUT_MS: int = 15000
    MONGODB_WAIT_QUEUE_TIMEOUT_MS: int = 2000
    MONGODB_HEARTBEAT_FREQUENCY_MS: int = 10000

    # Collections
    USERS_COLLECTION: str = "users"
    # Comma-separated archive collections unioned into the lifetime board
    LIFETIME_MONTH_COLLECTIONS: str = ""

    # Leaderboard cache
    LEADERBOARD_CACHE_TTL_SECONDS: float = 60.0
    LEADERBOARD_CACHE_MAX_ENTRIES: int = 100

    # Profile enrichment
    ENRICHMENT_NAME_CHUNK_SIZE: int = 40

    # Redis (Celery broker)
    REDIS_URL: str = "redis://redis:6379/0"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    def get_lifetime_collections(self) -> List[str]:
        """Archive collections for the lifetime union, env list first."""
        configured = [
            name.strip()
            for name in self.LIFETIME_MONTH_COLLECTIONS.split(",")
            if name.strip()
        ]
        return configured or list(DEFAULT_LIFETIME_MONTH_COLLECTIONS)


# Global settings instance
settings = Settings()
