from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./mcacrm.db"
    onyx_base_url: str = "https://services.onyxiq.com/api"
    onyx_bearer_token: str = ""
    onyx_timeout_seconds: float = 60.0
    sync_enabled: bool = True
    sync_cron: str = "0 */6 * * *"  # every 6 hours
    sync_timezone: str = "America/New_York"
    progress_retention_ms: int = 60 * 60 * 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
