"""Application configuration from environment."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Account Defense Simulator"
    debug: bool = False

    # Session cookie signing
    secret_key: str = "change-me-in-production-use-env"

    # Session cookie for the game snapshot
    session_cookie_name: str = "ads_session_id"
    session_cookie_max_age: int = 60 * 60 * 24  # 1 day

    # Idle in-memory snapshots are pruned after this many seconds
    session_ttl_seconds: int = 60 * 60 * 24

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
