from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url_override: str = ""
    db_path: str = "cooking_social.db"

    # Claude API
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"

    # Authentication
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_ttl_minutes: int = 60 * 24 * 7
    password_reset_ttl_minutes: int = 60
    min_password_length: int = 6
    max_sign_in_attempts: int = 5
    sign_in_window_seconds: int = 300

    # Kyutai TTS server
    kyutai_tts_endpoint: str = "https://toolkit.rork.com/tts/kyutai"
    kyutai_health_timeout: float = 5.0
    kyutai_request_timeout: float = 30.0
    tts_platform: str = "web"  # web, ios or android

    # Backend API (used by the Streamlit client for the batch TTS route)
    api_base_url: str = "http://localhost:8000"

    # Unmute realtime voice server
    unmute_server_url: str = "ws://localhost:8000/ws"

    # Avatar storage
    avatar_storage_dir: str = "storage/avatars"
    max_avatar_bytes: int = 5 * 1024 * 1024

    # Rate limiting for assistant requests
    rate_limit_max_requests: int = 30
    rate_limit_window_seconds: int = 60

    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL, defaulting to a local SQLite file."""
        if self.database_url_override:
            return self.database_url_override
        return f"sqlite:///{self.db_path}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
