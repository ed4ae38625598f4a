from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root (one level above the agrichannel package)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

DEFAULT_SECRET_KEY = "change_this_secret_in_production"


class Settings(BaseSettings):
    # Application
    app_name: str = "AgriChannel"
    app_env: str = "development"
    log_level: str = "INFO"

    # Security / JWT
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_days: int = 30
    bcrypt_rounds: int = 10

    # SQLite store
    database_url: str = f"sqlite:///{BASE_DIR / 'data' / 'database.sqlite'}"
    db_busy_timeout_ms: int = 5000
    db_pool_timeout_seconds: float = 5.0

    # Uploaded images
    media_root: Path = BASE_DIR / "public" / "uploads"
    media_url: str = "/uploads"
    max_upload_bytes: int = 4 * 1024 * 1024

    # Realtime feed
    online_count_interval_seconds: float = 1.0

    # Self-ping for hosts that idle out quiet processes
    keepalive_enabled: bool = True
    keepalive_interval_seconds: float = 240.0
    keepalive_url: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def resolved_keepalive_url(self) -> str:
        return self.keepalive_url or f"http://localhost:{self.port}/ping"


@lru_cache
def get_settings() -> Settings:
    return Settings()
