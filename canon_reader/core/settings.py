from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    READER_PORT: int = 7040
    REDIS_URL: Optional[str] = "redis://localhost:6379/0"

    TEXT_STORE_URL: str = "http://localhost:8000/api/"
    TEXT_STORE_API_KEY: Optional[str] = None
    TEXT_STORE_TIMEOUT_SEC: float = 20.0
    TEXT_STORE_RETRIES: int = 3
    PAGE_CACHE_TTL: int = 3600  # seconds

    # Optional TOML file with [reader] engine tuning
    READER_CONFIG_FILE: Optional[str] = None
    LOAD_REMOTE_INDEX: bool = False

    CORS_ORIGINS: str = "http://localhost:5173"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
